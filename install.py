#!/usr/bin/env python
"""Installation script to create virtual environment and install package."""

import os
import platform
import shutil
import subprocess
import sys


def run_command(cmd, description):
    """Run a command and exit on failure."""
    print(f"\n[*] {description}")
    try:
        subprocess.run(cmd, shell=True, check=True)
    except subprocess.CalledProcessError:
        print(f"[ERR] {description} - Failed!")
        sys.exit(1)
    print(f"[OK] {description}")


def main():
    print("\n[SETUP] anitrack")
    is_windows = platform.system() == "Windows"

    if os.path.exists(".venv"):
        print("\n[*] Removing existing virtual environment...")
        shutil.rmtree(".venv")

    venv_cmd = "py -m venv .venv" if is_windows else "python3 -m venv .venv"
    run_command(venv_cmd, "Create virtual environment")

    python = ".venv\\Scripts\\python.exe" if is_windows else "./.venv/bin/python"
    run_command(f"{python} -m pip install -e .[test]", "Install package and dependencies")

    os.makedirs("data", exist_ok=True)
    if not os.path.exists(os.path.join("data", "config.yaml")):
        shutil.copy("config.example.yaml", os.path.join("data", "config.yaml"))
        print("\n[OK] Created data/config.yaml from config.example.yaml")

    print("\n[NEXT] Put your access tokens in data/config.yaml (or ANILIST_ACCESS_TOKEN /")
    print("       MAL_ACCESS_TOKEN), then try:")
    print("   anitrack service")
    print("   anitrack progress 5 --anilist-id 21 --mal-id 21")
    print("   anitrack status completed --anilist-id 21 --translate")


if __name__ == "__main__":
    main()
