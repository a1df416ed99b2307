# searchctl

`searchctl` is the command-line layer of a tool for managing search
clusters. It defines the command tree (`profile`, `curl`, `knn`, `ad`,
`completion`), parses and validates arguments, locates and guards the
configuration file, and turns the results of each operation into output.
The work behind each command is done by objects you pass in: a profile
controller and request handlers.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## What the package does not do

The package ships no profile store and no cluster handlers. It does not
read or write profiles in the configuration file, and it does not build the
REST, k-NN or anomaly detection requests itself. Run from the command line,
`searchctl profile ...` reports `no profile controller is configured`, and
`searchctl curl|knn|ad ...` report that no handler is configured. Each
failure is printed as `<command> Command failed.` followed by
`Reason: <message>`, with exit status 1.

What works from the command line on its own:

```
searchctl --help
searchctl --version
searchctl completion bash
```

`--version` prints `searchctl version 1.0.0 <system>/<machine>`, for example
`linux/x86_64`.

## Configuration file

Every command that needs a profile controller resolves the configuration
file in this order (`searchctl.root.get_config_file_path`):

1. the `-c/--config` option;
2. the `SEARCHCTL_CONFIG` environment variable;
3. `~/.searchctl/config.yaml`, created empty if missing (folder mode `0700`,
   file mode `0600`).

`searchctl.profile_commands.check_config_permissions` then requires the
file's permissions to be exactly `0600`; otherwise it raises `ProfileError`
(`permissions 644 for '...' are too open. ...`).

`-c/--config` and `-p/--profile` may appear anywhere on the command line.

## Commands

### profile

```
searchctl profile create --name dev --endpoint https://localhost:9200 --auth-type basic
searchctl profile list
searchctl profile list --verbose
searchctl profile delete dev
```

`create` requires `-n/--name`, `-e/--endpoint` and `-a/--auth-type`
(`disabled`, `basic`, `aws-iam` or `cert`), and takes `-m/--max-retry`
(default 3) and `-t/--timeout` in seconds (default 10). For `basic` it asks
for a user name and a hidden password; for `aws-iam`, an AWS profile name
and a service name; for `cert`, certificate, key and CA file paths. A name
that already exists is refused.

### curl

```
searchctl curl get --path "_cluster/health" --pretty --filter-path "status"
searchctl curl put --path "my-index" --data "@mapping.json" --pretty
searchctl curl post --path "my-index/_doc" --data '{"message": "hello"}'
searchctl curl delete --path "my-index/_doc/1" --query-params "routing=node1"
```

Each action requires `-P/--path` and takes `-q/--query-params`,
`-H/--headers`, `--pretty`, `-o/--output-format` and `-f/--filter-path`;
all but `delete` also take `-d/--data`. The options are collected into a
`CurlRequest` and passed to the handler's `curl(request)`. The response is
printed; a `RequestError` raised by the handler has its response body
printed instead.

### knn

```
searchctl knn stats --nodes node1,node2 --stat-names graph_memory_usage
searchctl knn warmup index1 index2
```

`warmup` prints `successfully loaded N shards into memory`, or fails with
`WarmupError` (`F/T shards were failed to load into memory`) when any shard
failed.

### ad

```
searchctl ad create --generate-template
searchctl ad create detector.json
searchctl ad get "my-detector*"
searchctl ad start my-detector
searchctl ad stop --id DETECTOR_ID
searchctl ad update detector.json --force --start
searchctl ad delete my-detector --force
```

Detectors are selected by name or name pattern; `--id` selects by
identifier. `get` prints each detector as indented JSON. `create` and
`stop` without arguments print their usage. Processing stops at the first
failure.

### completion

```
searchctl completion bash
searchctl completion zsh
searchctl completion fish
searchctl completion powershell
```

The script is generated from the parser and completes every command,
sub-command and option.

## Using the library

The command functions take their collaborators as arguments:

- `searchctl.client.new_client(session=None)` returns a `Client` whose
  `request(method, url, **kwargs)` applies a 10 second default timeout. With
  no session it uses a `requests` session that retries up to 4 times on
  429/500/502/503/504 and does not verify TLS certificates.
- `searchctl.profile_commands`: `Profile`, `AWSIAM`, `Trust`, `ProfileError`,
  `create_profile`, `validate_profile_name`, `delete_profiles`,
  `list_profiles`, `format_profile_table`, `read_basic_auth`,
  `read_aws_iam_auth`, `read_certificate_auth`, `prompt_text`. A profile
  controller provides `create_profile(profile)`, `get_profiles_map()`,
  `delete_profiles(names)`, `get_profiles()`, `get_profile_names()` and
  `get_profile_for_execution(name)` (a `Profile` or `None`).
- `searchctl.root`: `build_version_string`, `default_config_file_path`,
  `get_config_file_path`, `create_default_config_file`, `display_error`,
  `get_profile`.
- `searchctl.knn_commands`: `get_statistics`, `warmup_indices`; the handler
  provides `get_statistics(nodes, names)` and `warmup_indices(indices)`
  returning an object with `failed` and `total`.
- `searchctl.curl_commands`: `CurlRequest`, `RequestError`,
  `build_curl_request`, `curl_execute`.
- `searchctl.ad_commands`: `create_detectors`, `delete_detectors`,
  `get_detectors`, `print_detector`, `start_detectors`, `stop_detectors`,
  `update_detectors`.
- `searchctl.completion.generate_completion(shell, parser)`.
- `searchctl.cli.build_parser()` and `searchctl.cli.main(argv=None)`, which
  returns the exit status.