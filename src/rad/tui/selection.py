"""What a selector application returns to the command that launched it."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Selection:
    """An optional operation applied to the selected ids, with extra args.

    Ids may be of any type; they are serialized as strings.
    """

    operation: str | None = None
    ids: list[Any] = field(default_factory=list)
    args: list[str] = field(default_factory=list)

    def with_operation(self, operation: str) -> Selection:
        self.operation = operation
        return self

    def with_id(self, id_: Any) -> Selection:
        self.ids.append(id_)
        return self

    def with_args(self, arg: str) -> Selection:
        self.args.append(arg)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "ids": [str(id_) for id_ in self.ids],
            "args": list(self.args),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
