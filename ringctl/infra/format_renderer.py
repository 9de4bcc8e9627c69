import json

import yaml

from ringctl.core.ports.render import Renderer


class JsonRenderer(Renderer):
    def render(self, data: dict) -> str:
        return json.dumps(data, indent=2, sort_keys=False)


class YamlRenderer(Renderer):
    def render(self, data: dict) -> str:
        return yaml.safe_dump(self._normalize(data), sort_keys=False)

    def _normalize(self, obj):
        # safe_dump refuses tuples and str subclasses such as StrEnum members
        if isinstance(obj, str):
            return str(obj)

        if isinstance(obj, dict):
            return {self._normalize(k): self._normalize(v) for k, v in obj.items()}

        if isinstance(obj, (list, tuple)):
            return [self._normalize(x) for x in obj]

        return obj
