import logging
import re
from typing import Dict, Iterable, Iterator, Optional, Tuple

from whatsapp_dispatch.core.exceptions import RegistryConfigurationError
from whatsapp_dispatch.data.templates import TEMPLATE_DEFINITIONS
from whatsapp_dispatch.schemas.template import TemplateDefinition

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{\{(\d+)\}\}")


class TemplateRegistry:
    """
    Read-only catalog of gateway templates, keyed by template id.

    Built once through `build()`, which rejects duplicate ids and templates
    whose argument metadata disagrees with the declared argument count.
    """

    def __init__(self, templates: Dict[str, TemplateDefinition]):
        self._templates = templates

    @classmethod
    def build(cls, definitions: Iterable[TemplateDefinition]) -> "TemplateRegistry":
        templates: Dict[str, TemplateDefinition] = {}
        for definition in definitions:
            if definition.id in templates:
                raise RegistryConfigurationError(
                    f"Duplicate template id '{definition.id}'"
                )
            cls._validate(definition)
            templates[definition.id] = definition
        return cls(templates)

    @staticmethod
    def _validate(definition: TemplateDefinition) -> None:
        if not (
            definition.arg_count
            == len(definition.arg_descriptions)
            == len(definition.sample_args)
        ):
            raise RegistryConfigurationError(
                f"Template '{definition.id}' declares {definition.arg_count} args but has "
                f"{len(definition.arg_descriptions)} descriptions and "
                f"{len(definition.sample_args)} sample args"
            )

        for placeholder in PLACEHOLDER_RE.findall(definition.body):
            if not 1 <= int(placeholder) <= definition.arg_count:
                raise RegistryConfigurationError(
                    f"Template '{definition.id}' body references {{{{{placeholder}}}}} "
                    f"outside 1..{definition.arg_count}"
                )

    def lookup(self, template_id: Optional[str]) -> Optional[TemplateDefinition]:
        if not isinstance(template_id, str):
            return None
        return self._templates.get(template_id)

    def list(self) -> Tuple[TemplateDefinition, ...]:
        return tuple(self._templates.values())

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._templates)

    def __contains__(self, template_id) -> bool:
        return isinstance(template_id, str) and template_id in self._templates

    def __iter__(self) -> Iterator[TemplateDefinition]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)


# Fails at import (process start) if the catalog is inconsistent
template_registry = TemplateRegistry.build(TEMPLATE_DEFINITIONS)
