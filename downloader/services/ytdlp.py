from typing import List, Optional, NamedTuple
from collections import deque
import asyncio
from downloader.config.settings import config
from downloader.core.errors import ExternalToolError, ToolErrorKind

class CompletedProcess(NamedTuple):
    """Subprocess result"""
    returncode: int
    stdout: bytes
    stderr: bytes

class SubprocessExecutor:
    """Execute subprocess with consistent error handling"""

    @staticmethod
    async def run(
        cmd: List[str],
        timeout: Optional[float] = None
    ) -> CompletedProcess:
        """
        Run subprocess and wait for it to exit.
        With no timeout the call waits as long as the process runs.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                stdin=asyncio.subprocess.DEVNULL
            )
        except FileNotFoundError as e:
            raise ExternalToolError(
                ToolErrorKind.NOT_FOUND,
                f"{cmd[0]} executable not found: {e}"
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=timeout
            )

            return CompletedProcess(
                returncode=process.returncode,
                stdout=stdout,
                stderr=stderr
            )

        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise ExternalToolError(
                ToolErrorKind.TIMEOUT,
                f"{cmd[0]} did not finish within {timeout} seconds"
            ) from e
        except BaseException:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

def stderr_summary(stderr: bytes, max_lines: Optional[int] = None) -> str:
    """Last non-empty stderr lines, joined"""
    lines = deque(maxlen=max_lines or config.download.stderr_max_lines)
    for line in stderr.decode(errors="replace").splitlines():
        line = line.strip()
        if line:
            lines.append(line)
    return "\n".join(lines)

def check_returncode(cmd: List[str], result: CompletedProcess) -> None:
    """Raise ExternalToolError for a non-zero exit status"""
    if result.returncode != 0:
        summary = stderr_summary(result.stderr)
        message = f"Command failed with exit code {result.returncode}: {' '.join(cmd)}"
        if summary:
            message = f"{message}\n{summary}"
        raise ExternalToolError(ToolErrorKind.FAILED, message)

class YTDLPCommandBuilder:
    """Build yt-dlp commands"""

    @staticmethod
    def _common_flags() -> List[str]:
        flags = ['--no-warnings']
        if not config.ytdlp.check_certificates:
            flags.append('--no-check-certificates')
        if config.ytdlp.prefer_free_formats:
            flags.append('--prefer-free-formats')
        return flags

    @staticmethod
    def build_version_command() -> List[str]:
        return [config.ytdlp.binary, '--version']

    @staticmethod
    def build_info_command(url: str) -> List[str]:
        """Build command for fetching video metadata without downloading"""
        cmd = [
            config.ytdlp.binary,
            '--dump-single-json',
        ]
        cmd.extend(YTDLPCommandBuilder._common_flags())
        cmd.append(url)

        return cmd

    @staticmethod
    def build_download_command(url: str, output_path: str, format_str: str) -> List[str]:
        """Build command for downloading and remuxing to the configured container"""
        cmd = [
            config.ytdlp.binary,
            url,
            # -o is an output template, so literal percent signs are escaped
            '-o', output_path.replace('%', '%%'),
            '-f', format_str,
            '--merge-output-format', config.ytdlp.merge_output_format,
        ]
        cmd.extend(YTDLPCommandBuilder._common_flags())

        if config.ytdlp.force_overwrites:
            cmd.append('--force-overwrites')

        return cmd
