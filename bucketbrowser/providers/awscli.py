import shutil
import subprocess
import sys
from typing import List, Optional

from ..errors import FetchFailed, ListingFailed
from .base import CloudProvider


class AwsCliProvider(CloudProvider):
    """Shells out to the ``aws`` command line tool.

    Credentials, region and endpoint resolution are left entirely to the
    CLI (environment, ~/.aws/config, --profile).
    """

    name = 'awscli'

    def __init__(self, profile: Optional[str] = None, executable: str = 'aws', verbose: bool = False):
        self.profile = profile
        self.executable = executable
        self.verbose = verbose

    def _base_command(self) -> List[str]:
        cmd = [self.executable]
        if self.profile:
            cmd += ['--profile', self.profile]
        return cmd

    def _run(self, args: List[str]) -> str:
        cmd = self._base_command() + args
        if self.verbose:
            print(f"[Exec: {' '.join(cmd)}]", file=sys.stderr)
        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode != 0:
            message = (result.stderr or '').strip() or f"exited with status {result.returncode}"
            raise subprocess.CalledProcessError(result.returncode, cmd, output=result.stdout, stderr=message)
        return result.stdout

    def is_available(self) -> bool:
        return shutil.which(self.executable) is not None

    def run_listing(self, bucket: str, prefix: str) -> str:
        args = [
            's3api', 'list-objects-v2',
            '--bucket', bucket,
            '--prefix', prefix,
            '--delimiter', '/',
            '--output', 'json',
        ]
        try:
            return self._run(args)
        except subprocess.CalledProcessError as e:
            raise ListingFailed(f"aws CLI error: {e.stderr}") from e
        except FileNotFoundError as e:
            raise ListingFailed(f"aws CLI not found: {self.executable}") from e

    def run_fetch(self, bucket: str, key: str, dest_path: str) -> bool:
        args = ['s3', 'cp', f"s3://{bucket}/{key}", dest_path]
        try:
            self._run(args)
        except subprocess.CalledProcessError as e:
            raise FetchFailed(f"aws CLI error: {e.stderr}") from e
        except FileNotFoundError as e:
            raise FetchFailed(f"aws CLI not found: {self.executable}") from e
        return True
