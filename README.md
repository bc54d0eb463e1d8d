# spacecli

A library of building blocks for working on Space projects from your own
machine:

- detect the micros in a project directory and the engine each one uses;
- check a Spacefile app icon;
- read a project's `Discovery.md`;
- keep the project's `.space` metadata and its `.gitignore` entry in order;
- package a project directory into a zip archive, honouring `.spaceignore`;
- build the commands that start micros locally, and route requests to them
  through one reverse proxy;
- small interactive terminal prompts and coloured output helpers.

## Detecting micros

```python
from spacecli.scanner import scan, clean_micro_name

for micro in scan("path/to/project"):
    print(micro.name, micro.src, micro.engine)

clean_micro_name("my.app")  # "my-app"
```

A directory that itself holds a micro (a `requirements.txt`, `Pipfile`,
`setup.py` or `main.py`; a `package.json`; a `go.mod`; an `index.html`) is
reported as a single micro. Otherwise each direct sub-directory is scanned,
in name order. Node projects are narrowed to `react`, `svelte`, `vue`,
`svelte-kit`, `next` or `nuxt` when their `package.json` lists the matching
dependency, and are reported as `nodejs16` otherwise. `scan_dir` scans one
directory, `detect_framework` only the Node framework.

The `Micro` dataclass and the engine names live in `spacecli.types`, along
with `is_frontend_engine`, `is_python_engine` and `is_fullstack_engine`.

## Icons

```python
from spacecli.icon import validate_icon, InvalidIconSizeError, IconError

try:
    validate_icon("icon.png")
except InvalidIconSizeError:
    print("the icon must be 512 pixels wide or high")
except IconError as exc:
    print("icon problem:", exc)
```

`get_icon_meta` reads PNG, GIF and JPEG headers and returns an `IconMeta`
with the content type and size. `validate_icon` accepts only PNG icons and
raises `InvalidIconSizeError` when neither side is 512 pixels; a missing or
unreadable file raises `InvalidIconPathError`, any other format
`InvalidIconTypeError`.

## Discovery file

`spacecli.discovery.open_discovery(dir)` returns the bytes of
`Discovery.md`. It raises `DiscoveryFileNotFoundError` when there is none and
`DiscoveryFileWrongCaseError` when the file exists under a name cased
differently.

## Project metadata

```python
from spacecli.project import (
    ProjectMeta, store_project_meta, get_project_id, add_space_to_gitignore,
)

store_project_meta("path/to/project", ProjectMeta(id="project-id", name="demo", alias="demo"))
add_space_to_gitignore("path/to/project")
print(get_project_id("path/to/project"))  # "project-id"
```

`cache_latest_version` and `get_latest_cached_version` keep the latest known
CLI version under `~/.detaspace/` (or under a `home` directory you pass).

## Ignore rules and packaging

```python
from spacecli.ignore import compile_ignore_lines

matcher = compile_ignore_lines(["node_modules", ".env", "!keep.env"])
matcher.matches("node_modules/index.js")  # True
```

`spacecli.archive.zip_dir(source_dir, default_patterns)` walks a project
directory, skips everything the given patterns and the project's
`.spaceignore` exclude, and returns the zipped contents together with the
number of files added.

## Local development

`spacecli.devenv` finds free ports (`get_free_port`, `is_port_active`),
records the port of a micro in `.space/micros/<name>.port`
(`write_port_file`, `parse_port`, `micro_port`), builds the command that
starts a micro (`micro_command`, returning a `CommandSpec` whose `start()` or
`run()` launches it with every output line prefixed by the micro's name) and
assembles a `ReverseProxy` from the port files (`proxy_from_dir`).
`serve_static` serves a directory over HTTP.

The proxy routes on the first path segment:

```python
from spacecli.proxy import extract_prefix, ProxyRoute, ReverseProxy

extract_prefix("/api/users")  # "/api"

proxy = ReverseProxy([ProxyRoute(prefix="/api", target="http://localhost:4201")])
proxy.resolve("/api/users")   # ("http://localhost:4201", "/users")
server = proxy.make_server("localhost", 4200)
server.serve_forever()
```

Requests whose prefix no route claims go to the route mounted at `/`, or get
a 404 when there is none.

## Prompts, checks and output

`spacecli.prompts` offers `run_choose`, `run_confirm` and `run_text`, which
raise `PromptCancelled` on Ctrl+C. `spacecli.checks` holds pre-run checks
(`check_dirs_exist`, `check_project_initialized`, `check_not_empty`, raising
`CheckError`) and `check_latest_version`, which prints a notice on stderr
when a newer CLI release is published. `spacecli.styles` and
`spacecli.emoji` format terminal text.

## What this package does not do

There is no `space` command: the package installs no program to run. It does
not talk to the Space service, so it cannot log in, create or link projects,
push code, or create releases, and it does not parse or validate a whole
Spacefile — only the icon it names.