"""
PS3Dec GUI — process launcher and output relay.

A RunSession spawns ps3dec, reads stdout and stderr on two daemon threads and
waits for the exit on a third. Everything is pushed onto one queue that the UI
drains on its own timer; the last message of a run is always the exit-code
sentinel.
"""

import sys
import queue
import logging
import threading
import subprocess

log = logging.getLogger(__name__)

EXIT_PREFIX = "__EXIT_CODE__"
STDERR_PREFIX = "ERR: "

LINKS = [
    ("Redump Decryption Keys:", "Aldos Tools", "https://ps3.aldostools.org/dkey.html"),
    ("PlayStation 3 Redumps:", "Myrient", "https://myrient.erista.me/"),
    ("Recommended VPN:", "iVPN", "https://www.ivpn.net/"),
    ("Source & Support", "Github", "https://github.com/tbwcjw"),
]


class ValidationError(Exception):
    """Launch refused; str(e) is the status line to show."""


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------

def validate(cfg):
    if not cfg.iso_path:
        raise ValidationError("Please select a target file.")
    if not cfg.ps3dec_path:
        raise ValidationError("Please select the executable.")
    if not cfg.auto and not cfg.decryption_key:
        raise ValidationError("Please enter a decryption key.")


def build_args(cfg):
    args = ["--iso", cfg.iso_path]
    if cfg.auto:
        args += ["--auto"]
    else:
        args += ["--dk", cfg.decryption_key]
    args += ["--tc", str(cfg.thread_count)]
    args += ["--skip"]
    return args


def format_command(executable, args):
    return f"Running command: {executable} {' '.join(args)}"


# ---------------------------------------------------------------------------
# Exit sentinel
# ---------------------------------------------------------------------------

def exit_message(code):
    return f"{EXIT_PREFIX}{code}"


def is_exit_message(message):
    return message.startswith(EXIT_PREFIX)


def parse_exit_code(message):
    """Exit code carried by a sentinel, None for ordinary lines or a garbled sentinel."""
    if not is_exit_message(message):
        return None
    try:
        return int(message[len(EXIT_PREFIX):])
    except ValueError:
        return None


def exit_status_text(message):
    code = parse_exit_code(message)
    if code is None:
        return "ps3dec exited with unknown code"
    return f"ps3dec exited with code {code}"


def apply_messages(messages):
    """Split drained messages into log text and the final status.

    Returns (log_text, status, exit_code). Every ordinary line is appended with
    a trailing newline; status and exit_code stay None until the sentinel shows
    up, and exit_code is also None for a garbled sentinel.
    """
    lines = []
    status = None
    exit_code = None
    for message in messages:
        if is_exit_message(message):
            status = exit_status_text(message)
            exit_code = parse_exit_code(message)
        else:
            lines.append(message + "\n")
    return "".join(lines), status, exit_code


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class RunSession:
    """One ps3dec invocation and the queue its output arrives on."""

    def __init__(self, executable, args):
        self.executable = executable
        self.args = list(args)
        self.command_line = format_command(executable, self.args)
        self.messages = queue.Queue()
        self.process = None
        self.finished = False
        self._readers = []
        self._waiter = None

    def start(self):
        self.messages.put(self.command_line)
        try:
            self.process = subprocess.Popen(
                [self.executable] + self.args,
                stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                text=True, errors="replace", bufsize=1,
                creationflags=getattr(subprocess, 'CREATE_NO_WINDOW', 0)
            )
        except (OSError, ValueError) as e:
            log.warning("Failed to start %s: %s", self.executable, e)
            self.messages.put(f"Failed to start ps3dec: {e}")
            self.messages.put(exit_message(-1))
            return self

        self._readers = [
            threading.Thread(target=self._read_stream,
                             args=(self.process.stdout, "stdout", ""), daemon=True),
            threading.Thread(target=self._read_stream,
                             args=(self.process.stderr, "stderr", STDERR_PREFIX), daemon=True),
        ]
        for t in self._readers:
            t.start()
        self._waiter = threading.Thread(target=self._wait, daemon=True)
        self._waiter.start()
        return self

    def _read_stream(self, stream, name, prefix):
        try:
            for line in stream:
                self.messages.put(prefix + line.rstrip('\n').rstrip('\r'))
        except (OSError, ValueError) as e:
            self.messages.put(f"Error reading {name}: {e}")
        finally:
            stream.close()

    def _wait(self):
        try:
            code = self.process.wait()
        except OSError as e:
            log.warning("Waiting for ps3dec failed: %s", e)
            code = -1
        # all output must be queued ahead of the sentinel
        for t in self._readers:
            t.join()
        if code is None or code < 0:
            code = -1
        self.messages.put(exit_message(code))

    def drain(self):
        """Everything queued so far, without blocking."""
        out = []
        while True:
            try:
                message = self.messages.get_nowait()
            except queue.Empty:
                break
            out.append(message)
            if is_exit_message(message):
                self.finished = True
        return out

    def wait(self, timeout=None):
        """Block until the sentinel has been queued or *timeout* runs out; True once it has."""
        if self._waiter is not None:
            self._waiter.join(timeout)
        return self._waiter is None or not self._waiter.is_alive()


def launch(cfg):
    validate(cfg)
    return RunSession(cfg.ps3dec_path, build_args(cfg)).start()


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

def open_url(url):
    if sys.platform == "win32":
        cmd = ["cmd", "/C", "start", "", url]
    elif sys.platform == "darwin":
        cmd = ["open", url]
    else:
        cmd = ["xdg-open", url]
    try:
        subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
                         creationflags=getattr(subprocess, 'CREATE_NO_WINDOW', 0))
    except OSError as e:
        log.debug("Could not open %s: %s", url, e)
