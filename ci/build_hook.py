"""Hatch build hook for compiling the native sentencepiece shim."""

import os
import platform
import shlex
import shutil
import subprocess
import sys
from pathlib import Path

from hatchling.builders.hooks.plugin.interface import BuildHookInterface


class NativeBuildHook(BuildHookInterface):
    """Build hook that compiles native/spiece_ffi.cpp into the package before packaging."""

    PLUGIN_NAME = "spiece-native"

    def initialize(self, version: str, build_data: dict) -> None:
        """Compile the shim unless it is already present or cannot be built here."""
        package_root = Path(self.root)

        if self.target_name == "sdist":
            # Don't build for sdist - just include source
            return

        if os.environ.get("SPIECE_SKIP_NATIVE_BUILD"):
            self._log("SPIECE_SKIP_NATIVE_BUILD is set, skipping native build")
            return

        lib_name = self._get_lib_name()
        target_lib = package_root / "spiece" / lib_name

        # Pre-built in CI
        if target_lib.exists():
            self._log(f"Using existing {lib_name}")
            build_data["artifacts"].append(f"spiece/{lib_name}")
            return

        source = package_root / "native" / "spiece_ffi.cpp"
        if not source.exists():
            self._log(f"{source} not found, skipping native build")
            return

        flags = self._sentencepiece_flags()
        compiler = os.environ.get("CXX") or shutil.which("c++") or shutil.which("g++")
        if compiler is None or flags is None:
            # The package still installs; the library can be supplied via SPIECE_LIBRARY.
            self._log("C++ compiler or sentencepiece development files not found, skipping")
            return

        self._log(f"Building {lib_name}...")
        self._run_build(compiler, source, target_lib, flags)
        build_data["artifacts"].append(f"spiece/{lib_name}")
        build_data["pure_python"] = False
        build_data["infer_tag"] = True

    def _get_lib_name(self) -> str:
        """Get platform-specific library name."""
        system = platform.system()
        if system == "Darwin":
            return "libspiece_ffi.dylib"
        elif system == "Windows":
            return "spiece_ffi.dll"
        else:
            return "libspiece_ffi.so"

    def _sentencepiece_flags(self) -> list[str] | None:
        """Compiler and linker flags for sentencepiece, from pkg-config."""
        if not shutil.which("pkg-config"):
            return None
        result = subprocess.run(
            ["pkg-config", "--cflags", "--libs", "sentencepiece"],
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return shlex.split(result.stdout)

    def _run_build(self, compiler: str, source: Path, target: Path, flags: list[str]) -> None:
        """Run the compiler."""
        cmd = [
            compiler,
            "-std=c++17",
            "-O2",
            "-fPIC",
            "-shared",
            "-I",
            str(source.parent),
            str(source),
            "-o",
            str(target),
            *flags,
        ]
        subprocess.run(cmd, check=True)

        # Strip binaries
        if shutil.which("strip"):
            is_macos = platform.system() == "Darwin"
            strip_cmd = ["strip", "-x", str(target)] if is_macos else ["strip", str(target)]
            subprocess.run(strip_cmd, check=False)

    def _log(self, msg: str) -> None:
        """Log build progress."""
        print(f"[spiece-native] {msg}", file=sys.stderr)
