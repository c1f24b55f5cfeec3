"""Static format/provider compatibility table.

The facade consults this table once per request, before any emitter runs,
so ``UnsupportedCombinationError`` is raised from a single place. The lookup
helpers below are pure reads used by the CLI and any UI layer.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple, Union

from ..exceptions import UnsupportedCombinationError, UnsupportedFormatError
from ..models import ALL_PROVIDERS, CloudProvider, IaCFormat


@dataclass(frozen=True)
class FormatSpec:
    """Static description of one IaC format."""

    format: IaCFormat
    display_name: str
    extension: str
    language: str
    providers: Tuple[CloudProvider, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.format.value,
            "name": self.display_name,
            "extension": self.extension,
            "language": self.language,
            "providers": [p.value for p in self.providers],
        }


FORMAT_TABLE: Dict[IaCFormat, FormatSpec] = {
    IaCFormat.TERRAFORM: FormatSpec(
        IaCFormat.TERRAFORM, "Terraform", "tf", "hcl", ALL_PROVIDERS
    ),
    IaCFormat.CLOUDFORMATION: FormatSpec(
        IaCFormat.CLOUDFORMATION,
        "AWS CloudFormation",
        "yaml",
        "yaml",
        (CloudProvider.AWS,),
    ),
    IaCFormat.ARM: FormatSpec(
        IaCFormat.ARM, "Azure ARM Template", "json", "json", (CloudProvider.AZURE,)
    ),
    IaCFormat.KUBERNETES: FormatSpec(
        IaCFormat.KUBERNETES, "Kubernetes YAML", "yaml", "yaml", ALL_PROVIDERS
    ),
    IaCFormat.DOCKER_COMPOSE: FormatSpec(
        IaCFormat.DOCKER_COMPOSE, "Docker Compose", "yml", "yaml", ALL_PROVIDERS
    ),
}


def get_format_spec(iac_format: Union[IaCFormat, str]) -> FormatSpec:
    """Look up a format's static description.

    Raises:
        UnsupportedFormatError: If ``iac_format`` is not a known format
    """
    try:
        return FORMAT_TABLE[IaCFormat(iac_format)]
    except ValueError as e:
        raise UnsupportedFormatError(
            str(iac_format), [f.value for f in FORMAT_TABLE], cause=e
        ) from e


def get_supported_formats() -> List[FormatSpec]:
    """All formats with their compatible providers, in table order."""
    return list(FORMAT_TABLE.values())


def get_file_extension(iac_format: Union[IaCFormat, str]) -> str:
    return get_format_spec(iac_format).extension


def get_display_name(iac_format: Union[IaCFormat, str]) -> str:
    return get_format_spec(iac_format).display_name


def get_language(iac_format: Union[IaCFormat, str]) -> str:
    """Primary syntax-highlighting language for a format."""
    return get_format_spec(iac_format).language


def get_compatible_providers(
    iac_format: Union[IaCFormat, str],
) -> Tuple[CloudProvider, ...]:
    return get_format_spec(iac_format).providers


def is_compatible(
    iac_format: Union[IaCFormat, str], provider: Union[CloudProvider, str]
) -> bool:
    try:
        cloud = CloudProvider(provider)
    except ValueError:
        return False
    return cloud in get_compatible_providers(iac_format)


def check_compatibility(
    iac_format: Union[IaCFormat, str], provider: Union[CloudProvider, str]
) -> None:
    """Fail closed when ``iac_format`` cannot target ``provider``.

    Args:
        iac_format: Requested IaC format
        provider: Requested cloud provider

    Raises:
        UnsupportedFormatError: Unknown format
        UnsupportedCombinationError: Format restricted to other provider(s)
    """
    spec = get_format_spec(iac_format)
    if not is_compatible(spec.format, provider):
        raise UnsupportedCombinationError(
            spec.format.value,
            str(provider),
            [p.value for p in spec.providers],
            display_name=spec.display_name,
        )
