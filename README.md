# cdlocal

A library for preparing one local application deployment: it checks the
options, works out which lifecycle events to run, and builds the deployment
spec. It also has helpers for installing an agent as a service on a Linux host.

It has three modules.

## Lifecycle events and bundle locations: `cdlocal.events`

- `DEFAULT_ORDERED_EVENTS` is the full default lifecycle. It runs from
  `BeforeBlockTraffic` to `AfterAllowTraffic`.
- `resolve_events(user_events)` returns the events to run.
  - With no events, it returns the full default lifecycle.
  - When you name events, `DownloadBundle` and `Install` always come first, in
    that order.
  - Your other events follow in the order you gave them.
  - If you name `DownloadBundle` or `Install` yourself, they are not repeated.
- `merge_custom_events(defaults, user_events)` adds events that are not in the
  defaults to the end of the list. Each event appears only once.
- `parse_s3_url(raw)` reads an `s3://bucket/key` URL and returns an
  `S3Location`, which has the fields `bucket`, `key`, `version_id` and `etag`.
  - It reads the optional `versionId` and `etag` query parameters.
  - It skips any query parameter that has no `=`.
  - It raises `ValueError` if the URL is not an S3 URL, or if it has no bucket
    or no key.
- `is_remote_location(location)` returns `True` for three kinds of location:
  - an `s3://` URL;
  - an `https://` URL;
  - a path that contains `/` and `github.com`.
- `random_alphanumeric(n)` returns `n` random ASCII letters and digits. It uses
  the `secrets` module.

```python
from cdlocal.events import parse_s3_url, resolve_events

resolve_events(["BeforeInstall", "ApplicationStart"])
# ['DownloadBundle', 'Install', 'BeforeInstall', 'ApplicationStart']

location = parse_s3_url("s3://my-bucket/releases/app.tar?versionId=v1&etag=abc")
location.bucket      # 'my-bucket'
location.key         # 'releases/app.tar'
location.version_id  # 'v1'
```

## Local deployments: `cdlocal.localdeploy`

`LocalOptions` holds the settings for one deployment. Its defaults are:

| Field | Default |
|---|---|
| `bundle_type` | `directory` |
| `file_exists_behavior` | `DISALLOW` |
| `deployment_group` | `default-local-deployment-group` |
| `deployment_group_name` | `LocalFleet` |
| `appspec_filename` | `appspec.yml` |

### `validate(options)`

This function checks the options and raises `LocalDeployError` at the first
problem it finds. It checks the following, in this order:

1. The bundle type must be `tar`, `tgz`, `zip` or `directory`.
2. The file-exists behaviour must be `DISALLOW`, `OVERWRITE` or `RETAIN`. Case
   does not matter.
3. A bundle location must be given.
4. For a local bundle:
   - The path must exist.
   - A `directory` bundle must be a directory, and any other bundle type must
     not be one.
   - A directory bundle must contain an appspec file. If you set a custom
     `appspec_filename`, the directory must contain that file. Otherwise it
     must contain `appspec.yml` or `appspec.yaml`.

Remote locations skip the checks in step 4.

### `prepare(options)`

This function validates the options and returns a copy of them. In the copy:

- a local bundle path is made absolute;
- `application_name` is set to the bundle location if it was empty.

### `build_spec(options)`

This function returns a frozen `DeploymentSpec`.

- The deployment ID has the form `d-XXXXXXXXX-local`.
- The file-exists behaviour is upper-cased.
- Custom events are merged into `all_possible_lifecycle_events`.
- The `source` is a `RevisionSource`:
  - `S3` for `s3://` locations, with the bucket, key, version and ETag filled in;
  - `LOCAL_DIRECTORY` for directory bundles;
  - `LOCAL_FILE` otherwise.
- An invalid S3 URL raises `LocalDeployError`.

```python
from cdlocal.localdeploy import LocalDeployError, LocalOptions, build_spec, prepare

options = LocalOptions(bundle_location="s3://my-bucket/releases/app.zip", bundle_type="zip")
try:
    spec = build_spec(prepare(options))
except LocalDeployError as exc:
    print(f"cannot deploy: {exc}")
else:
    print(spec.deployment_id, spec.source.value, spec.bucket, spec.key)
```

## Agent installation helpers: `cdlocal.sysinstall`

### `InitSystem`

This names the host's init system. Its values are `SYSTEMD`, `SYSV` and
`UNKNOWN`.

### `FileInstaller`

This class does the file work for an installation:

- `mkdir_all(path)` creates a directory and any missing parents, with mode
  `0o755`.
- `write_file(path, data, mode)` writes bytes to a file. It uses `mode` only
  when it creates the file.
- `copy_file(src, dst, mode)` copies a file's contents. It uses `mode` only
  when it creates the destination.
- `rename(old_path, new_path)` moves a file and replaces any file already at the
  new path.

### `ServiceController(init_system)`

This class runs the init system's tools:

- `enable(name)` runs `systemctl enable` or `chkconfig NAME on`.
- `start(name)` runs `systemctl start` or `service NAME start`.
- `daemon_reload()` runs `systemctl daemon-reload`. It does nothing for other
  init systems.

Errors are raised as follows:

- A command that fails raises `subprocess.CalledProcessError`.
- A tool that is missing raises `FileNotFoundError`.
- `enable` and `start` raise `ValueError` for `InitSystem.UNKNOWN`.

### Service state and file checks

- `is_service_enabled(name, init_system)` and
  `is_service_running(name, init_system)` return `False` when the state cannot
  be found out. This includes a missing tool and an unknown init system.
- `file_hash(path)` returns the SHA-256 digest of a file's contents, as bytes.
- `files_match(path_a, path_b)` returns `True` only when both files can be read
  and have the same contents.

## What this package does not do

- It does not run a deployment. It does not download bundles, unpack archives,
  run lifecycle hook scripts or copy application files into place.
- It has no command-line program.
- For agent installation, it supplies only the building blocks listed above.
  It does not do the following:
  - detect the init system;
  - generate service unit files or a default configuration;
  - work out or carry out an installation plan.