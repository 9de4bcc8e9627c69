from dataclasses import dataclass, asdict
from typing import Any


@dataclass
class Message:
    """
    Application-level message exchanged with a storage daemon.
    The prober encodes/decodes messages via the Serializer, while the
    rest of the code manipulates them in this native Python form.
    """
    type: str
    """
    type of message, e.g. "ring/describe", "ok", "ko"
    """

    data: dict[Any, Any]
    """
    A dictionary of serializable data
    """

    def to_dict(self) -> dict[str, Any]:
        """Return a plain dictionary representation of the message."""
        return asdict(self)
