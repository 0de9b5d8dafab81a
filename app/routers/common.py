import logging
from contextlib import contextmanager

from fastapi import HTTPException

from app.errors import CmsError

logger = logging.getLogger(__name__)


@contextmanager
def translate_errors(action: str):
    """Map domain errors onto HTTP responses; anything unexpected becomes a 500."""
    try:
        yield
    except CmsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_dict()) from e
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error trying to {action}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to {action}") from e
