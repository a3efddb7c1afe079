"""Column types shared by the ORM models."""
import json

from sqlalchemy import Text
from sqlalchemy.types import TypeDecorator


class JSONEncodedText(TypeDecorator):
    """Stores a list or dict as JSON text and parses it back on read.

    ``empty`` is the value returned for NULL columns; it is called so every
    row gets its own container.
    """

    impl = Text
    cache_ok = True

    def __init__(self, empty=list, *args, **kwargs):
        self.empty = empty
        super().__init__(*args, **kwargs)

    def process_bind_param(self, value, dialect):
        if value is None:
            value = self.empty()
        return json.dumps(value, ensure_ascii=False)

    def process_result_value(self, value, dialect):
        if value is None or value == "":
            return self.empty()
        return json.loads(value)
