r"""Parsing of parameter declarations and path templates.

A parameter declaration is ``name`` (mandatory), ``name?`` (optional),
``name[]`` (mandatory array) or ``name[]?`` (optional array). A path
template holds ``{name}`` and ``{name?}`` tokens.
"""

from __future__ import annotations

__all__ = [
    "PATH_PARAMETER_PATTERN",
    "ParameterInfo",
    "extract_array_type_parameter_name",
    "extract_parameter_info",
    "extract_path_parameters",
    "sanitize_path",
]

import re
from dataclasses import dataclass

PATH_PARAMETER_PATTERN = re.compile(r"{(?P<path_parameter>\w+\??)}")

_REPEATED_SLASHES = re.compile(r"/{2,}")


@dataclass(frozen=True)
class ParameterInfo:
    """A parsed parameter declaration.

    Attributes:
        name: The parameter name, without the ``?`` and ``[]`` suffixes.
        is_mandatory: Whether a value must be provided.
        is_array: Whether the parameter was declared with ``[]``.
    """

    name: str
    is_mandatory: bool = True
    is_array: bool = False

    @property
    def token(self) -> str:
        """The path template token of the parameter."""
        return f"{{{self.name}{'' if self.is_mandatory else '?'}}}"


def sanitize_path(path: str) -> str:
    r"""Collapse repeated slashes and remove one trailing slash.

    Example:
        ```pycon
        >>> from webrequest.binding import sanitize_path
        >>> sanitize_path("/a//b///c/")
        '/a/b/c'

        ```
    """
    if not path:
        return path
    path = _REPEATED_SLASHES.sub("/", path)
    if path.endswith("/"):
        path = path[:-1]
    return path


def extract_array_type_parameter_name(parameter: str) -> str:
    r"""Remove the ``[]`` suffix of an array declaration.

    A declaration without the suffix is returned unchanged.

    Example:
        ```pycon
        >>> from webrequest.binding import extract_array_type_parameter_name
        >>> extract_array_type_parameter_name("tags[]")
        'tags'
        >>> extract_array_type_parameter_name("title")
        'title'

        ```
    """
    if parameter.endswith("[]"):
        return parameter[:-2]
    return parameter


def extract_parameter_info(parameter: str) -> ParameterInfo:
    r"""Parse a parameter declaration.

    A trailing ``?`` marks the parameter optional. It is stripped before a
    trailing ``[]`` marks the parameter as an array.

    Example:
        ```pycon
        >>> from webrequest.binding import extract_parameter_info
        >>> extract_parameter_info("tags[]?")
        ParameterInfo(name='tags', is_mandatory=False, is_array=True)

        ```
    """
    is_mandatory = not parameter.endswith("?")
    if not is_mandatory:
        parameter = parameter[:-1]
    name = extract_array_type_parameter_name(parameter)
    return ParameterInfo(name=name, is_mandatory=is_mandatory, is_array=name != parameter)


def extract_path_parameters(path: str) -> list[str]:
    r"""Extract the tokens of a path template, left to right.

    A token occurring several times is extracted once per occurrence.

    Example:
        ```pycon
        >>> from webrequest.binding import extract_path_parameters
        >>> extract_path_parameters("/users/{id}/posts/{postId?}")
        ['id', 'postId?']

        ```
    """
    if not path:
        return []
    return [match.group("path_parameter") for match in PATH_PARAMETER_PATTERN.finditer(path)]
