import asyncio
import platform
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..constants import logger, OUTPUT_BUFFER_LIMIT


@dataclass
class CommandResult:
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    overflowed: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out and not self.overflowed


async def _spawn(args: List[str], cwd: str, env: Optional[Dict[str, str]]) -> asyncio.subprocess.Process:
    # npm/npx are batch files on Windows and need a shell
    if platform.system() == "Windows":
        return await asyncio.create_subprocess_shell(
            " ".join(args),
            cwd=cwd,
            env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    return await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        env=env,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )


async def run_npm_command(
    args: List[str],
    cwd: str,
    timeout: float,
    env: Optional[Dict[str, str]] = None,
    buffer_limit: int = OUTPUT_BUFFER_LIMIT,
) -> CommandResult:
    """Run an npm/npx command with a wall-clock timeout and a cap on captured output.

    The process is killed when it outlives `timeout` or when either stream
    grows past `buffer_limit` bytes. Never raises for a non-zero exit.
    """
    proc = await _spawn(args, cwd, env)
    chunks = {"stdout": bytearray(), "stderr": bytearray()}
    overflow = asyncio.Event()

    async def _drain(stream: asyncio.StreamReader, key: str):
        while True:
            data = await stream.read(65536)
            if not data:
                return
            chunks[key].extend(data)
            if len(chunks[key]) > buffer_limit:
                overflow.set()
                return

    readers = asyncio.ensure_future(
        asyncio.gather(_drain(proc.stdout, "stdout"), _drain(proc.stderr, "stderr"))
    )
    overflow_watch = asyncio.ensure_future(overflow.wait())
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    done, _ = await asyncio.wait(
        {readers, overflow_watch}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
    )
    timed_out = not done

    if readers in done and not overflow.is_set():
        try:
            await asyncio.wait_for(proc.wait(), timeout=max(deadline - loop.time(), 0.1))
        except asyncio.TimeoutError:
            timed_out = True

    overflow_watch.cancel()
    if timed_out or overflow.is_set():
        reason = f"timed out after {timeout}s" if timed_out else "output exceeded buffer limit"
        logger.warning(f"Killing {' '.join(args)}: {reason}")
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        readers.cancel()
        try:
            await readers
        except asyncio.CancelledError:
            pass
        await proc.wait()

    return CommandResult(
        returncode=proc.returncode,
        stdout=chunks["stdout"].decode("utf-8", errors="replace"),
        stderr=chunks["stderr"].decode("utf-8", errors="replace"),
        timed_out=timed_out,
        overflowed=overflow.is_set(),
    )
