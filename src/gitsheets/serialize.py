"""Deterministic serialization and document I/O for gitsheets."""

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Dict, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .errors import DeserializationError, PersistenceError, SerializationError

logger = logging.getLogger(__name__)

DocumentT = TypeVar("DocumentT", bound=BaseModel)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


_UMASK = _current_umask()


def _target_mode(target: Path) -> int:
    """Mode a plain ``open(target, "w")`` would leave the file with."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except OSError:
        return 0o666 & ~_UMASK


class DeterministicSerializer:
    """Renders documents as stable, human-readable JSON and reads them back."""

    def to_json_string(self, payload: Dict[str, Any], kind: str = "document") -> str:
        """Convert payload to pretty-printed JSON with sorted keys."""
        try:
            return json.dumps(
                payload,
                ensure_ascii=False,
                sort_keys=True,
                indent=2,
                allow_nan=False,
            )
        except (TypeError, ValueError) as exc:
            raise SerializationError(kind, str(exc)) from exc

    def to_json_bytes(self, payload: Dict[str, Any], kind: str = "document") -> bytes:
        """Render payload to UTF-8 bytes terminated by a newline."""
        text = self.to_json_string(payload, kind) + "\n"
        try:
            return text.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise SerializationError(kind, str(exc)) from exc

    def write_document(
        self, path: Union[str, Path], payload: Dict[str, Any], kind: str = "document"
    ) -> None:
        """Write payload to path atomically.

        The content goes to a temporary file in the destination directory,
        which is then renamed over the target. The file keeps the target's
        existing permissions, or gets the umask default when it is new.
        """
        data = self.to_json_bytes(payload, kind)
        target = Path(path)
        mode = _target_mode(target)
        logger.debug("Writing document", extra={"path": str(target), "kind": kind, "bytes": len(data)})

        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
            )
        except OSError as exc:
            raise PersistenceError(str(target), "write", exc.strerror or str(exc)) from exc

        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            # mkstemp creates 0600 files
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, target)
        except OSError as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                logger.debug("Temporary file already gone", extra={"path": tmp_path})
            raise PersistenceError(str(target), "write", exc.strerror or str(exc)) from exc

        logger.info("Saved %s", kind, extra={"path": str(target)})

    def read_document(self, path: Union[str, Path], model: Type[DocumentT]) -> DocumentT:
        """Read a JSON document from path and validate it against model."""
        source = str(path)
        try:
            content = Path(path).read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise DeserializationError(source, f"not valid UTF-8: {exc.reason}") from exc
        except OSError as exc:
            raise PersistenceError(source, "read", exc.strerror or str(exc)) from exc

        return self.parse_document(content, model, source)

    def parse_document(
        self, content: Union[str, bytes], model: Type[DocumentT], source: str = "<document>"
    ) -> DocumentT:
        """Validate JSON content against model."""
        try:
            document = model.model_validate_json(content)
        except ValidationError as exc:
            errors = [
                {"loc": ".".join(str(part) for part in error["loc"]), "msg": error["msg"]}
                for error in exc.errors()
            ]
            logger.warning(
                "Document failed validation",
                extra={"source": source, "errors": len(errors)},
            )
            raise DeserializationError(
                source, f"{len(errors)} validation error(s) for {model.__name__}", errors
            ) from exc

        logger.debug("Loaded document", extra={"source": source, "model": model.__name__})
        return document

    def parse_payload(
        self, payload: Dict[str, Any], model: Type[DocumentT], source: str = "<payload>"
    ) -> DocumentT:
        """Validate an already-decoded JSON object with the same rules as a file."""
        content = json.dumps(payload, ensure_ascii=False)
        return self.parse_document(content, model, source)

    def create_success_envelope(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Create success envelope around payload."""
        logger.debug("Creating success envelope")
        return {"ok": True, "data": payload}

    def create_error_envelope(
        self, error_code: str, error_message: str, details: Dict[str, Any] = None
    ) -> Dict[str, Any]:
        """Create error envelope."""
        logger.debug("Creating error envelope", extra={"code": error_code})
        error_data = {
            "code": error_code,
            "message": error_message,
        }
        if details:
            error_data["details"] = details

        return {"ok": False, "error": error_data}
