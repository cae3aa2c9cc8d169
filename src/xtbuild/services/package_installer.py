"""npm package installation for extensions distributed through the registry."""

import subprocess
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional, Sequence

from xtbuild.errors import BuildError


class PackageInstaller:
    """Thin npm client: load once, subscribe to log lines, install by name."""

    EVENTS = ("log",)

    def __init__(
        self,
        logger,
        command_runner,
        cwd: Optional[str] = None,
        npm_binary: str = "npm",
        subprocess_module=subprocess,
        max_workers: Optional[int] = None,
    ):
        self.logger = logger
        self.command_runner = command_runner
        self.cwd = cwd
        self.npm_binary = npm_binary
        self.subprocess = subprocess_module
        self.max_workers = max_workers
        self.loaded = False
        self._handlers: Dict[str, List[Callable[[str], None]]] = {event: [] for event in self.EVENTS}

    def load(self):
        result = self.command_runner.run([self.npm_binary, "--version"], check=True, capture_output=True)
        self.logger.debug("Using npm %s", (result.stdout or "").strip())
        self.loaded = True

    def on(self, event: str, handler: Callable[[str], None]):
        if event not in self._handlers:
            raise ValueError(f"Unknown package installer event: {event}")
        self._handlers[event].append(handler)

    def off(self, event: str, handler: Callable[[str], None]):
        if handler in self._handlers.get(event, []):
            self._handlers[event].remove(handler)

    def _emit(self, event: str, message: str):
        for handler in self._handlers[event]:
            handler(message)

    def install(self, name: str):
        if not self.loaded:
            raise BuildError("npm is not loaded. Call load() before installing packages.")

        cmd = [self.npm_binary, "install", name]
        self.logger.debug("Executing: %s", " ".join(cmd))
        try:
            process = self.subprocess.Popen(
                cmd,
                stdout=self.subprocess.PIPE,
                stderr=self.subprocess.STDOUT,
                text=True,
                bufsize=1,
                cwd=self.cwd,
            )
        except FileNotFoundError as exc:
            raise BuildError(
                f"Required command not found: {self.npm_binary}. Please install it and try again."
            ) from exc

        last_lines: List[str] = []
        try:
            if process.stdout:
                for line in process.stdout:
                    cleaned = line.rstrip()
                    if not cleaned:
                        continue
                    last_lines = (last_lines + [cleaned])[-20:]
                    self._emit("log", cleaned)
        except BaseException:
            process.terminate()
            try:
                process.wait(timeout=10)
            except self.subprocess.TimeoutExpired:
                process.kill()
            raise

        returncode = process.wait()
        if returncode != 0:
            message = f"npm install {name} failed ({returncode})"
            if last_lines:
                message = f"{message}\n" + "\n".join(last_lines)
            raise BuildError(message)

    def install_all(self, names: Sequence[str]):
        """Installs every package concurrently; the first failure is raised."""
        if not names:
            return

        executor = ThreadPoolExecutor(max_workers=self.max_workers or len(names))
        try:
            futures = [executor.submit(self.install, name) for name in names]
            for future in as_completed(futures):
                future.result()
        except BaseException:
            # running installs finish in the background, their results are dropped
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
