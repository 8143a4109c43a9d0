#!/usr/bin/env python3
"""
===============================================================================
                          GEFORCE DRIVER CHECK
===============================================================================
Version: 0.5.0

Checks whether the installed NVIDIA GeForce display driver is out of date.

Features:
• Installed version read from nvidia-smi (System32 or legacy NVSMI folder)
• Latest version and download URL from the NVIDIA driver lookup service
• Opens the download page in the default browser
• Optional download-and-install with a live progress bar
• JSON configuration for endpoint, schema, probe and installer flags
"""

import argparse
import json
import logging
import os
import re
import subprocess
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple
from urllib.parse import urlparse

import requests
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)
from rich.table import Table

VERSION = "0.5.0"
SMI = "nvidia-smi.exe"
NVIDIA_URL = (
    "https://gfwsl.geforce.com/services_toolkit/services/com/nvidia/services/"
    "AjaxDriverService.php?func=DriverManualLookup&psid=101&pfid=859&osID=57"
    "&languageCode=1033&beta=0&isWHQL=0&dltype=-1&dch=1&upCRD=0&qnf=0"
    "&sort1=0&numberOfResults=10"
)
USER_AGENT = f"GeForceDriverCheck/{VERSION}"

console = Console()
logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# ERRORS
# ═══════════════════════════════════════════════════════════════════════════════


class DriverCheckError(Exception):
    """Base class for every failure that aborts a driver check run."""


class FetchError(DriverCheckError):
    """The remote version page could not be retrieved."""


class NetworkError(FetchError):
    pass


class EncodingError(FetchError):
    pass


class ParseError(DriverCheckError):
    """The remote version page did not contain usable version data."""


class MalformedJSONError(ParseError):
    pass


class SchemaMismatchError(ParseError):
    pass


class ProbeError(DriverCheckError):
    """The installed driver version could not be determined."""


class MissingEnvironmentError(ProbeError):
    pass


class ToolNotFoundError(ProbeError):
    pass


class ExecutionError(ProbeError):
    pass


class PatternNotFoundError(ProbeError):
    pass


class FormatError(DriverCheckError):
    """A version string is not a number."""


class ConfigError(DriverCheckError):
    """A setting or the config directory is unusable."""


class UnsafeURLError(DriverCheckError):
    """A download URL was refused before being handed to the shell."""


class DownloadError(DriverCheckError):
    """The driver installer could not be downloaded."""


class CreateError(DownloadError):
    pass


class TransferError(DownloadError):
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# CORE DATA MODELS
# ═══════════════════════════════════════════════════════════════════════════════


class ComparisonResult(Enum):
    """Outcome of comparing the installed and available versions."""

    OUTDATED = "⬆️"
    UP_TO_DATE = "✅"
    AHEAD = "🧪"


class DriverAction(Enum):
    NONE = "none"
    OPEN_BROWSER = "open_browser"
    AUTO_INSTALL = "auto_install"
    QUIT = "quit"


@dataclass
class VersionInfo:
    """Installed and available driver versions for one run."""

    installed: str
    available: str
    download_url: str
    result: Optional[ComparisonResult] = None

    @property
    def is_outdated(self) -> bool:
        return self.result == ComparisonResult.OUTDATED


@dataclass
class DownloadTask:
    """State of a single installer download."""

    url: str
    destination: Path
    bytes_total: int = 0
    bytes_transferred: int = 0

    @property
    def complete(self) -> bool:
        return self.bytes_total > 0 and self.bytes_transferred == self.bytes_total


@dataclass
class ActionOption:
    """One entry of the action prompt, selected by its key character."""

    key: str
    label: str
    action: DriverAction


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURATION SYSTEM
# ═══════════════════════════════════════════════════════════════════════════════


class DriverCheckConfig:
    """Configuration with defaults, merged with the user's config.json."""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or Path.home() / ".geforce_driver_check"
        self.config_file = self.config_dir / "config.json"
        self.log_file = self.config_dir / "driver_check.log"

        self.settings = {
            "endpoint": {
                "url": NVIDIA_URL,
                "timeout_seconds": 15,
            },
            "schema": {
                "list_field": "IDS",
                "entry_field": "downloadInfo",
                "version_field": "Version",
                "url_field": "DownloadURL",
            },
            "probe": {
                "executable": SMI,
                "pattern": r"Driver Version: ([0-9]+\.[0-9]+)",
                "timeout_seconds": 30,
                # Checked in order; first element is the environment variable
                # holding the base directory.
                "candidates": [
                    ["windir", "System32"],
                    ["ProgramFiles", "NVIDIA Corporation", "NVSMI"],
                ],
            },
            "install": {
                "enabled": False,
                "silent": False,
                "file_name": "nvidiadrv.exe",
                "arguments": [],
                "silent_arguments": ["-s", "-noreboot", "-noeula"],
                "timeout_seconds": 60,
                "chunk_size": 128 * 1024,
            },
            "performance": {
                "parallel_lookup": True,
            },
            "ui": {
                "pause_on_error": True,
                "default_choice": 0,
            },
        }
        self.load()

    def load(self):
        """Load configuration from file with error handling."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    loaded_settings = json.load(f)
                if isinstance(loaded_settings, dict):
                    self._merge_settings(self.settings, loaded_settings)
                else:
                    logger.warning(f"Ignoring config {self.config_file}: not a JSON object")
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load config: {e}")

    def _merge_settings(self, base: dict, loaded: dict):
        """Recursively merge settings."""
        for key, value in loaded.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_settings(base[key], value)
            else:
                base[key] = value

    def save(self):
        """Save current configuration to file."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self.settings, f, indent=2, default=str)
        except OSError as e:
            logger.error(f"Failed to save config: {e}")

    @property
    def installer_arguments(self) -> List[str]:
        install = self.settings["install"]
        return list(install["silent_arguments"] if install["silent"] else install["arguments"])


def setup_logging(config: DriverCheckConfig, verbose: bool = False):
    """Send log records to the log file in the config directory."""
    config.config_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(config.log_file, encoding="utf-8"),
            logging.NullHandler(),
        ],
    )


def require_env(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return an environment variable or raise MissingEnvironmentError."""
    environ = os.environ if environ is None else environ
    value = environ.get(name)
    if not value:
        raise MissingEnvironmentError(f"Environment variable '{name}' not found!")
    return value


# ═══════════════════════════════════════════════════════════════════════════════
# REMOTE VERSION LOOKUP
# ═══════════════════════════════════════════════════════════════════════════════


class PageFetcher(Protocol):
    """Anything able to turn a URL into the text of the page."""

    def fetch(self, url: str) -> str:
        ...


def make_session() -> requests.Session:
    s = requests.Session()
    s.headers.update({"User-Agent": USER_AGENT})
    return s


class HttpPageFetcher:
    """Single-attempt HTTP fetcher returning the body as UTF-8 text."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 15):
        self.session = session or make_session()
        self.timeout = timeout

    def fetch(self, url: str) -> str:
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            content = response.content
        except requests.RequestException as e:
            logger.warning(f"Request failed: {url} - {e}")
            raise NetworkError("Unable to access the online resources!") from e

        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError("The page has invalid UTF-8 characters!") from e


def extract_version_information(payload: str, schema: Dict[str, str]) -> Tuple[str, str]:
    """Return (version, download URL) from the driver lookup JSON."""
    try:
        data = json.loads(payload)
    except (ValueError, RecursionError) as e:
        raise MalformedJSONError("Incorrect information at the online resource!") from e

    try:
        info = data[schema["list_field"]][0][schema["entry_field"]]
        version = info[schema["version_field"]]
        url = info[schema["url_field"]]
    except (KeyError, IndexError, TypeError) as e:
        raise SchemaMismatchError(
            "Cannot find driver information from the online resource!"
        ) from e

    if not isinstance(version, str):
        raise SchemaMismatchError("Cannot find version information from the online resource!")
    if not isinstance(url, str):
        raise SchemaMismatchError("Cannot find download URL information from the online resource!")
    return version, url


def get_available_version_information(
    fetcher: PageFetcher, config: DriverCheckConfig
) -> Tuple[str, str]:
    """Fetch the lookup endpoint through the given fetcher and extract the version."""
    payload = fetcher.fetch(config.settings["endpoint"]["url"])
    version, url = extract_version_information(payload, config.settings["schema"])
    logger.info(f"Available driver version: {version} ({url})")
    return version, url


# ═══════════════════════════════════════════════════════════════════════════════
# LOCAL VERSION PROBE
# ═══════════════════════════════════════════════════════════════════════════════


def locate_executable(
    executable_name: str,
    candidates: Sequence[Sequence[str]],
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """Return the first existing candidate path of the diagnostic tool.

    Each candidate is an environment variable naming a base directory
    followed by path components below it. Variables are only read when
    their candidate is reached.
    """
    for env_name, *parts in candidates:
        path = Path(require_env(env_name, environ), *parts, executable_name)
        logger.debug(f"Looking for {executable_name} at {path}")
        if path.exists():
            return path

    raise ToolNotFoundError(
        f"Couldn't detect location for {executable_name}. Maybe the driver is not installed?"
    )


def run_probe(path: Path, timeout: Optional[float] = None) -> str:
    """Run the diagnostic tool without arguments and return its stdout."""
    try:
        result = subprocess.run(
            [str(path)],
            capture_output=True,
            check=False,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ExecutionError(f"{path.name} did not finish in {timeout} seconds!") from e
    except OSError as e:
        raise ExecutionError(
            "Couldn't detect installed version. Maybe the driver is not installed?"
        ) from e

    if result.returncode != 0:
        logger.debug(f"{path.name} exited {result.returncode}")
    return result.stdout.decode("utf-8", errors="replace")


def extract_installed_version(output: str, pattern: str) -> str:
    match = re.search(pattern, output)
    if not match:
        raise PatternNotFoundError("Cannot find installed version information!")
    return match.group(1)


def get_installed_version(
    executable_name: str,
    config: DriverCheckConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Locate and run the diagnostic tool, returning the installed driver version."""
    probe = config.settings["probe"]
    path = locate_executable(executable_name, probe["candidates"], environ)
    output = run_probe(path, probe["timeout_seconds"])
    version = extract_installed_version(output, probe["pattern"])
    logger.info(f"Installed driver version: {version} ({path})")
    return version


# ═══════════════════════════════════════════════════════════════════════════════
# VERSION COMPARISON
# ═══════════════════════════════════════════════════════════════════════════════


def parse_version(version: str) -> float:
    """Read the first two groups of a version string as one decimal number.

    "551.23" becomes 551.23. Groups past the second are ignored, so
    "551.1" and "551.10" compare equal and "551.100" sorts below "551.2".
    """
    groups = version.strip().split(".")
    if len(groups) < 2 or not all(re.fullmatch(r"[0-9]+", g) for g in groups[:2]):
        raise FormatError(f"Cannot convert version number '{version}'!")
    return float(f"{groups[0]}.{groups[1]}")


def compare_versions(installed: str, available: str) -> ComparisonResult:
    try:
        installed_key = parse_version(installed)
    except FormatError as e:
        raise FormatError(f"Cannot convert installed version number '{installed}'!") from e
    try:
        available_key = parse_version(available)
    except FormatError as e:
        raise FormatError(f"Cannot convert available version number '{available}'!") from e

    if installed_key < available_key:
        return ComparisonResult.OUTDATED
    if installed_key == available_key:
        return ComparisonResult.UP_TO_DATE
    return ComparisonResult.AHEAD


# ═══════════════════════════════════════════════════════════════════════════════
# PROCESS LAUNCHER
# ═══════════════════════════════════════════════════════════════════════════════


SHELL_METACHARACTERS = set('&|<>^"%')


def validate_download_url(url: str) -> str:
    """Refuse URLs that are not plain http(s) or that cmd.exe would interpret."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise UnsafeURLError(f"Refusing to open non-HTTP URL: {url!r}")
    bad = sorted(c for c in set(url) if c in SHELL_METACHARACTERS or c.isspace())
    if bad:
        raise UnsafeURLError(f"Refusing to open URL with shell characters {''.join(bad)!r}: {url!r}")
    return url


class ShellLauncher:
    """Starts the browser and the installer through the command interpreter."""

    def __init__(self, comspec: str):
        self.comspec = comspec
        self.browser: Optional[subprocess.Popen] = None

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "ShellLauncher":
        return cls(require_env("ComSpec", environ))

    def open_url(self, url: str):
        """Open the URL with the default browser without waiting for it."""
        url = validate_download_url(url)
        cmd = [self.comspec, "/c", "start", "", url]
        logger.info(f"Opening browser: {url}")
        try:
            # cmd exits as soon as start hands off; kept so it is reaped on exit
            self.browser = subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as e:
            raise ExecutionError(f"Unable to start the web browser: {e}") from e

    def run_installer(self, path: Path, arguments: Sequence[str]) -> int:
        """Run the installer and wait for it to exit."""
        cmd = [str(path), *arguments]
        logger.info(f"Running installer: {' '.join(cmd)}")
        try:
            return subprocess.run(cmd, check=False).returncode
        except OSError as e:
            raise ExecutionError(f"Unable to start the installer: {e}") from e


# ═══════════════════════════════════════════════════════════════════════════════
# DOWNLOADER
# ═══════════════════════════════════════════════════════════════════════════════


ProgressCallback = Callable[[int, int], None]


def download_file(
    url: str,
    destination: Path,
    session: Optional[requests.Session] = None,
    progress_callback: Optional[ProgressCallback] = None,
    timeout: float = 60,
    chunk_size: int = 128 * 1024,
) -> DownloadTask:
    """Stream url into destination, reporting (total, transferred) after each chunk.

    A failed transfer leaves the partial file in place.
    """
    session = session or make_session()
    task = DownloadTask(url=url, destination=destination)

    try:
        f = open(destination, "wb")
    except OSError as e:
        raise CreateError(f"Unable to create file {destination}!") from e

    with f:
        try:
            with session.get(
                url, stream=True, timeout=timeout, headers={"Accept-Encoding": "identity"}
            ) as r:
                r.raise_for_status()
                # Content-Length of an encoded body counts compressed bytes,
                # while iter_content yields decoded ones.
                if r.headers.get("Content-Encoding", "identity").lower() == "identity":
                    task.bytes_total = int(r.headers.get("Content-Length", "0") or 0)
                for chunk in r.iter_content(chunk_size=chunk_size):
                    if not chunk:
                        continue
                    f.write(chunk)
                    task.bytes_transferred += len(chunk)
                    if progress_callback:
                        progress_callback(task.bytes_total, task.bytes_transferred)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Download failed after {task.bytes_transferred} bytes: {e}")
            raise TransferError("Unable to access the online resources!") from e
        except OSError as e:
            raise TransferError(f"Unable to write file {destination}!") from e

    if task.bytes_total and task.bytes_transferred != task.bytes_total:
        raise TransferError(
            f"Download interrupted: {task.bytes_transferred} of {task.bytes_total} bytes received!"
        )
    if not task.bytes_total:
        task.bytes_total = task.bytes_transferred
        if progress_callback:
            progress_callback(task.bytes_total, task.bytes_transferred)

    logger.info(f"Downloaded {task.bytes_transferred} bytes to {destination}")
    return task


class RichDownloadProgress:
    """Progress bar usable as a download_file() progress callback."""

    def __init__(self, description: str):
        self.progress = Progress(
            TextColumn(f"[bold blue]{description}", justify="left"),
            BarColumn(bar_width=None),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=console,
        )
        self.task_id = None

    def __enter__(self) -> "RichDownloadProgress":
        self.progress.start()
        self.task_id = self.progress.add_task("download", total=None)
        return self

    def __exit__(self, *exc):
        self.progress.stop()

    def __call__(self, total: int, transferred: int):
        self.progress.update(self.task_id, total=total or None, completed=transferred)


def auto_install(
    url: str,
    config: DriverCheckConfig,
    launcher: ShellLauncher,
    temp_dir: Path,
    session: Optional[requests.Session] = None,
):
    """Download the driver installer to temp_dir, run it, then delete it."""
    install = config.settings["install"]
    url = validate_download_url(url)
    destination = temp_dir / install["file_name"]

    with RichDownloadProgress("⬇️  Downloading driver") as progress:
        download_file(
            url,
            destination,
            session=session,
            progress_callback=progress,
            timeout=install["timeout_seconds"],
            chunk_size=install["chunk_size"],
        )
    console.print("[green]✅ Download finished![/green]")

    try:
        console.print("[cyan]🔧 Installing...[/cyan]")
        exit_code = launcher.run_installer(destination, config.installer_arguments)
        if exit_code != 0:
            logger.warning(f"Installer exited with code {exit_code}")
            console.print(f"[yellow]⚠️  Installer exited with code {exit_code}[/yellow]")
    finally:
        console.print("[dim]🗑️  Deleting temporary file...[/dim]")
        try:
            destination.unlink()
            console.print("[green]Done.[/green]")
        except OSError as e:
            logger.warning(f"Failed to delete {destination}: {e}")
            console.print(f"[yellow]⚠️  Wasn't able to delete temporary file {destination}![/yellow]")


# ═══════════════════════════════════════════════════════════════════════════════
# ACTION DISPATCH
# ═══════════════════════════════════════════════════════════════════════════════


def ask_confirmation(
    message: str,
    options: Sequence[str],
    default: int = 0,
    input_func: Optional[Callable[[str], str]] = None,
) -> int:
    """Ask until the first typed character matches an option; Enter picks default.

    Matching is case-insensitive. Returns the index of the chosen option.
    """
    input_func = input_func or console.input
    question = f"{message} ({','.join(options)})[{options[default]}] "
    while True:
        answer = input_func(question).strip()
        if not answer:
            return default
        first = answer[0].lower()
        for index, option in enumerate(options):
            if option.lower() == first:
                return index


def build_action_options(allow_install: bool = False) -> List[ActionOption]:
    options = [ActionOption("d", "(d)ownload the latest driver", DriverAction.OPEN_BROWSER)]
    if allow_install:
        options.append(ActionOption("i", "(i)nstall it automatically", DriverAction.AUTO_INSTALL))
    options.append(ActionOption("q", "(q)uit", DriverAction.QUIT))
    return options


class ActionDispatcher:
    """Maps a comparison result and the user's answer to an action and runs it."""

    def __init__(
        self,
        options: List[ActionOption],
        launcher: ShellLauncher,
        installer: Optional[Callable[[str], None]] = None,
        prompt: Callable[..., int] = ask_confirmation,
        default_index: int = 0,
    ):
        valid = isinstance(default_index, int) and not isinstance(default_index, bool)
        if not valid or not 0 <= default_index < len(options):
            raise ConfigError(f"Default choice {default_index!r} is not one of {len(options)} options!")
        self.options = options
        self.launcher = launcher
        self.installer = installer
        self.prompt = prompt
        self.default_index = default_index

    @property
    def question(self) -> str:
        labels = [o.label for o in self.options]
        return "Do you want to " + ", ".join(labels[:-1]) + f", or {labels[-1]}?"

    def decide(self, result: ComparisonResult) -> DriverAction:
        """Prompt only when outdated; otherwise there is nothing to do."""
        if result != ComparisonResult.OUTDATED:
            return DriverAction.NONE
        index = self.prompt(self.question, [o.key for o in self.options], self.default_index)
        return self.options[index].action

    def dispatch(self, result: ComparisonResult, url: str) -> DriverAction:
        action = self.decide(result)
        logger.info(f"Selected action: {action.value}")

        if action == DriverAction.OPEN_BROWSER:
            self.launcher.open_url(url)
        elif action == DriverAction.AUTO_INSTALL:
            if self.installer is None:
                raise DriverCheckError("Automatic installation is not available!")
            self.installer(url)
        return action


# ═══════════════════════════════════════════════════════════════════════════════
# MAIN APPLICATION
# ═══════════════════════════════════════════════════════════════════════════════


class DriverCheckApp:
    """Main application controller."""

    def __init__(
        self,
        config: DriverCheckConfig,
        fetcher: PageFetcher,
        dispatcher: ActionDispatcher,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.config = config
        self.fetcher = fetcher
        self.dispatcher = dispatcher
        self.environ = environ

    def lookup_versions(self) -> VersionInfo:
        """Query installed and available versions; both must succeed."""
        executable = self.config.settings["probe"]["executable"]

        def installed():
            return get_installed_version(executable, self.config, self.environ)

        def available():
            return get_available_version_information(self.fetcher, self.config)

        if self.config.settings["performance"]["parallel_lookup"]:
            with ThreadPoolExecutor(max_workers=2) as executor:
                installed_future = executor.submit(installed)
                available_future = executor.submit(available)
                installed_version = installed_future.result()
                available_version, url = available_future.result()
        else:
            installed_version = installed()
            available_version, url = available()

        return VersionInfo(installed_version, available_version, url)

    def display_versions(self, info: VersionInfo):
        table = Table(box=box.ROUNDED, show_header=True, header_style="bold blue")
        table.add_column("📋 Installed", style="cyan")
        table.add_column("🎯 Available", style="green")
        table.add_column("📊 Status", justify="center")
        table.add_row(info.installed, info.available, info.result.value)
        console.print(table)

    def run(self) -> DriverAction:
        console.print(f"[bold]Display Driver Check version {VERSION}[/bold]")

        with console.status("[bold cyan]🔍 Checking driver versions..."):
            info = self.lookup_versions()
        info.result = compare_versions(info.installed, info.available)
        logger.info(f"Comparison: {info.installed} vs {info.available} -> {info.result.name}")

        self.display_versions(info)
        if info.is_outdated:
            console.print(f"\n[bold yellow]🎯 New driver version is available: {info.available}[/bold yellow]")
        else:
            console.print("\n[green]✨ Driver is up to date![/green]")

        return self.dispatcher.dispatch(info.result, info.download_url)


def handle_error(error: DriverCheckError, pause: bool = True) -> int:
    """Show the error, wait for acknowledgment and return the exit status."""
    logger.error(str(error))
    console.print(
        Panel(f"[red]❌ {error}[/red]", title="[bold red]Error[/bold red]", border_style="red")
    )
    if pause:
        try:
            console.input("\nPress Enter...")
        except EOFError:
            pass
    return 1


def main(argv: Optional[List[str]] = None):
    """Application entry point."""
    parser = argparse.ArgumentParser(
        description=f"GeForce Driver Check v{VERSION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  geforce-driver-check                   # Check and offer the download page
  geforce-driver-check --install         # Also offer download-and-install
  geforce-driver-check --install --silent
        """,
    )
    parser.add_argument(
        "--install", action="store_true", help="Offer to download and run the installer"
    )
    parser.add_argument(
        "--silent", action="store_true", help="Run the installer with silent flags"
    )
    parser.add_argument(
        "--no-pause", action="store_true", help="Do not wait for Enter after an error"
    )
    parser.add_argument(
        "--sequential", action="store_true", help="Query local and remote versions one after another"
    )
    parser.add_argument("--url", help="Override the driver lookup URL")
    parser.add_argument("--config-dir", type=Path, help="Configuration directory")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    args = parser.parse_args(argv)

    config = DriverCheckConfig(args.config_dir)
    if args.install:
        config.settings["install"]["enabled"] = True
    if args.silent:
        config.settings["install"]["silent"] = True
    if args.sequential:
        config.settings["performance"]["parallel_lookup"] = False
    if args.url:
        config.settings["endpoint"]["url"] = args.url
    pause = config.settings["ui"]["pause_on_error"] and not args.no_pause

    try:
        try:
            setup_logging(config, args.verbose)
        except OSError as e:
            raise ConfigError(f"Unable to write log file {config.log_file}: {e}") from e
        logger.info(f"Display Driver Check {VERSION} starting")

        launcher = ShellLauncher.from_environment()
        session = make_session()
        installer = None
        if config.settings["install"]["enabled"]:
            installer = partial(
                auto_install,
                config=config,
                launcher=launcher,
                temp_dir=Path(require_env("TEMP")),
                session=session,
            )

        dispatcher = ActionDispatcher(
            build_action_options(config.settings["install"]["enabled"]),
            launcher,
            installer=installer,
            default_index=config.settings["ui"]["default_choice"],
        )
        fetcher = HttpPageFetcher(session, config.settings["endpoint"]["timeout_seconds"])
        DriverCheckApp(config, fetcher, dispatcher).run()
    except DriverCheckError as e:
        sys.exit(handle_error(e, pause))
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Cancelled.[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
