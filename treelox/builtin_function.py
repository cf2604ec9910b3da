from dataclasses import dataclass
from typing import Any, Callable, List


@dataclass
class BuiltinFunction:
    name: str
    arity: int
    fn: Callable[[List[Any]], Any]

    def call(self, interpreter: Any, args: List[Any]) -> Any:
        return self.fn(args)

    def __str__(self) -> str:
        return f"<native fn {self.name}>"

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"
