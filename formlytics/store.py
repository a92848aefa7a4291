import json
import logging
import os
import tempfile
import threading
from pathlib import Path

from pydantic import ValidationError

from formlytics.config import get_settings
from formlytics.exceptions import FormNotFoundError, StoreError
from formlytics.models.forms import Form, Question, Response

logger = logging.getLogger(__name__)

# Serializes read-modify-write cycles on the data file across request threads
_write_lock = threading.RLock()


class FormStore:
    """Reads/writes forms and their responses to a local JSON file.

    Layout: {"forms": {form_id: form}, "responses": {form_id: [response, ...]}},
    with camelCase keys as produced by the models' aliases.
    """

    def __init__(self, path: Path):
        self.path = path

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {"forms": {}, "responses": {}}
        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to read data file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Data file {self.path} must contain a JSON object")
        data.setdefault("forms", {})
        data.setdefault("responses", {})
        return data

    def _write_all(self, data: dict) -> None:
        """Replace the data file atomically so readers never see a partial write."""
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp", delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(json.dumps(data, indent=2))
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreError(f"Failed to write data file {self.path}: {e}") from e

    def locked(self) -> threading.RLock:
        """Lock to hold across a check-then-write sequence spanning several store calls."""
        return _write_lock

    def count_forms(self) -> int:
        return len(self._read_all()["forms"])

    def get_form(self, form_id: str, user_id: str | None = None) -> Form:
        """Load a form with its questions. user_id, when given, must own the form."""
        raw = self._read_all()["forms"].get(form_id)
        if raw is None:
            raise FormNotFoundError(f"Form {form_id} not found")
        try:
            form = Form.model_validate(raw)
        except ValidationError as e:
            raise StoreError(f"Form {form_id} is malformed: {e}") from e
        if user_id is not None and form.user_id != user_id:
            logger.warning("User %s requested form %s owned by someone else", user_id, form_id)
            raise FormNotFoundError(f"Form {form_id} not found")
        form.questions.sort(key=lambda q: q.order)
        return form

    def get_question_catalog(self, form_id: str) -> list[Question]:
        """Questions of a form, ascending by order."""
        return self.get_form(form_id).questions

    def get_responses_with_answers(self, form_id: str) -> list[Response]:
        raw = self._read_all()["responses"].get(form_id, [])
        try:
            return [Response.model_validate(r) for r in raw]
        except ValidationError as e:
            raise StoreError(f"Responses for form {form_id} are malformed: {e}") from e

    def add_response(self, response: Response) -> None:
        stored = response.model_dump(mode="json", by_alias=True, exclude={"answers": {"__all__": {"question"}}})
        with _write_lock:
            data = self._read_all()
            data["responses"].setdefault(response.form_id, []).append(stored)
            self._write_all(data)

    def save_form(self, form: Form) -> None:
        with _write_lock:
            data = self._read_all()
            data["forms"][form.id] = form.model_dump(mode="json", by_alias=True)
            self._write_all(data)


def get_store() -> FormStore:
    return FormStore(get_settings().data_file)
