import os

from typing import Any


class dotdict(dict):
    """dot.notation access to read-only config entries"""

    def __setattr__(self, __name: str, __value: Any) -> None:
        raise NotImplementedError()

    def __delattr__(self, __name: str) -> None:
        raise NotImplementedError()

    def __getattr__(self, __name: str) -> Any:
        if __name in self:
            return self[__name]
        else:
            raise KeyError("Config entry '{}' not found".format(__name))

    # Returns a copy where the given string entries are replaced by PREFIX + KEY environment variables, if set
    def with_env(self, prefix: str, *keys: str) -> "dotdict":
        values = dict(self)

        for key in keys:
            if key not in values:
                raise KeyError("Config entry '{}' not found".format(key))

            values[key] = os.environ.get(prefix + key, values[key])

        return dotdict(values)
