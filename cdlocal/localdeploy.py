"""Option validation and deployment-spec construction for local deployments."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from enum import Enum

from cdlocal.events import (
    DEFAULT_ORDERED_EVENTS,
    is_remote_location,
    merge_custom_events,
    parse_s3_url,
    random_alphanumeric,
)

VALID_BUNDLE_TYPES = frozenset({"tar", "tgz", "zip", "directory"})
VALID_FILE_EXISTS_BEHAVIORS = frozenset({"DISALLOW", "OVERWRITE", "RETAIN"})
DEFAULT_APPSPEC_FILENAMES = ("appspec.yml", "appspec.yaml")


class LocalDeployError(Exception):
    """Raised when a local deployment cannot be prepared."""


class RevisionSource(str, Enum):
    """Where the revision for a deployment comes from."""

    S3 = "S3"
    LOCAL_DIRECTORY = "Local Directory"
    LOCAL_FILE = "Local File"


@dataclass
class LocalOptions:
    """Command-line options for a local deployment."""

    bundle_location: str = ""
    bundle_type: str = "directory"
    file_exists_behavior: str = "DISALLOW"
    deployment_group: str = "default-local-deployment-group"
    deployment_group_name: str = "LocalFleet"
    application_name: str = ""
    events: list[str] = field(default_factory=list)
    config_file: str = ""
    appspec_filename: str = "appspec.yml"


@dataclass(frozen=True)
class DeploymentSpec:
    """Everything needed to run the lifecycle events of one deployment."""

    deployment_id: str
    deployment_group_id: str
    deployment_group_name: str
    application_name: str
    source: RevisionSource
    bundle_type: str
    file_exists_behavior: str
    appspec_path: str
    all_possible_lifecycle_events: tuple[str, ...]
    deployment_creator: str = "user"
    deployment_type: str = "IN_PLACE"
    bucket: str = ""
    key: str = ""
    version: str = ""
    etag: str = ""
    local_location: str = ""


def _check_appspec(options: LocalOptions) -> None:
    location = options.bundle_location
    custom = options.appspec_filename
    if custom and custom not in DEFAULT_APPSPEC_FILENAMES:
        if not os.path.exists(os.path.join(location, custom)):
            raise LocalDeployError(f"{custom} not found in {location!r}")
        return
    if not any(os.path.exists(os.path.join(location, name)) for name in DEFAULT_APPSPEC_FILENAMES):
        raise LocalDeployError(f"appspec.yml/appspec.yaml not found in {location!r}")


def validate(options: LocalOptions) -> None:
    """Check the options, raising :class:`LocalDeployError` on the first problem."""
    if options.bundle_type not in VALID_BUNDLE_TYPES:
        raise LocalDeployError(
            f"invalid bundle type {options.bundle_type!r} (must be tar, tgz, zip, or directory)"
        )
    if options.file_exists_behavior.upper() not in VALID_FILE_EXISTS_BEHAVIORS:
        raise LocalDeployError(f"invalid file-exists-behavior {options.file_exists_behavior!r}")
    if not options.bundle_location:
        raise LocalDeployError("bundle location required")

    location = options.bundle_location
    if is_remote_location(location):
        return

    try:
        is_dir = os.path.isdir(location)
        os.stat(location)
    except OSError as exc:
        raise LocalDeployError(f"bundle location {location!r}: {exc}") from exc

    if options.bundle_type == "directory":
        if not is_dir:
            raise LocalDeployError(f"bundle type is directory but {location!r} is a file")
        _check_appspec(options)
    elif is_dir:
        raise LocalDeployError(
            f"bundle type is {options.bundle_type} but {location!r} is a directory"
        )


def prepare(options: LocalOptions) -> LocalOptions:
    """Validate the options and return a copy ready for building a spec.

    Local bundle locations are made absolute, and the application name
    defaults to the bundle location.
    """
    validate(options)
    location = options.bundle_location
    if not is_remote_location(location):
        location = os.path.abspath(location)
    return dataclasses.replace(
        options,
        bundle_location=location,
        application_name=options.application_name or location,
        events=list(options.events),
    )


def build_spec(options: LocalOptions) -> DeploymentSpec:
    """Build a deployment spec with a fresh local deployment id."""
    common = dict(
        deployment_id=f"d-{random_alphanumeric(9)}-local",
        deployment_group_id=options.deployment_group,
        deployment_group_name=options.deployment_group_name,
        application_name=options.application_name,
        appspec_path=options.appspec_filename,
        file_exists_behavior=options.file_exists_behavior.upper(),
        all_possible_lifecycle_events=tuple(
            merge_custom_events(DEFAULT_ORDERED_EVENTS, options.events)
        ),
    )

    location = options.bundle_location
    if location.startswith("s3://"):
        try:
            s3 = parse_s3_url(location)
        except ValueError as exc:
            raise LocalDeployError(str(exc)) from exc
        return DeploymentSpec(
            **common,
            source=RevisionSource.S3,
            bundle_type=options.bundle_type,
            bucket=s3.bucket,
            key=s3.key,
            version=s3.version_id,
            etag=s3.etag,
        )
    if options.bundle_type == "directory":
        return DeploymentSpec(
            **common,
            source=RevisionSource.LOCAL_DIRECTORY,
            bundle_type="directory",
            local_location=location,
        )
    return DeploymentSpec(
        **common,
        source=RevisionSource.LOCAL_FILE,
        bundle_type=options.bundle_type,
        local_location=location,
    )