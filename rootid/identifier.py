"""Root build identifier: reserved keys and the identifier factory."""

from __future__ import annotations

from typing import Mapping

from .template import TemplateResolver, resolve

BUILD_ID_TEMPLATE = "${JOB_NAME}-${BUILD_NUMBER}"

# Parameter name used to carry the identifier between jobs
BUILD_ROOT_PARAMETER_KEY = "buildInfo.build.root"

# Matrix property stamped on deployed artifacts
BUILD_ROOT_MATRIX_PARAM_KEY = "build.root"


def compute_root_identifier(env: Mapping[str, str], resolver: TemplateResolver = resolve) -> str:
    """
    Compute the identifier of a root build.

    Tokens missing from ``env`` stay unresolved in the result, e.g.
    ``{"JOB_NAME": "foo"}`` yields ``"foo-${BUILD_NUMBER}"``.
    """
    return resolver(BUILD_ID_TEMPLATE, env)


def build_environment(
    job_name: str,
    build_number: int | str,
    extra: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Environment a host exposes to a running build; ``extra`` wins on conflicts."""
    env = {"JOB_NAME": job_name, "BUILD_NUMBER": str(build_number)}
    if extra:
        env.update(extra)
    return env
