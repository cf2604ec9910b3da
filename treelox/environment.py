from typing import Any, Dict, Optional

from .errors import UndefinedVariable


class Environment:
    """A scope mapping identifiers to values, chained to its enclosing scope.

    Closures hold a reference to the environment they were defined in, so a
    scope stays alive as long as any function that captured it.
    """
    def __init__(self, enclosing: Optional['Environment'] = None):
        self.enclosing = enclosing
        self.values: Dict[str, Any] = {}

    def define(self, name: str, value: Any):
        # redefinition in the same scope simply rebinds, as Lox globals allow
        self.values[name] = value

    def get(self, name: str, line: int) -> Any:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.enclosing
        raise UndefinedVariable(name, line)

    def assign(self, name: str, value: Any, line: int):
        """Rebind name in the nearest scope that declares it."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.values:
                env.values[name] = value
                return
            env = env.enclosing
        raise UndefinedVariable(name, line)

    def depth(self) -> int:
        """Number of enclosing scopes above this one."""
        count = 0
        env = self.enclosing
        while env is not None:
            count += 1
            env = env.enclosing
        return count
