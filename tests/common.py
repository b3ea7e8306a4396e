import contextlib
import os


class RecordingFileProgress:
    """Stands in for FileProgress and remembers every reported position."""

    def __init__(self, size):
        self.size = size
        self.positions = []
        self.finished = False

    def advance(self, n):
        last = self.positions[-1] if self.positions else 0
        self.positions.append(last + n)

    def update_to(self, position):
        self.positions.append(position)

    def finish(self):
        self.finished = True


class RecordingProgress:
    def __init__(self):
        self.files = []

    def start(self):
        pass

    def stop(self):
        pass

    @contextlib.contextmanager
    def file(self, filename, size):
        fp = RecordingFileProgress(size)
        self.files.append((filename, fp))
        yield fp
        fp.finish()


def sample_data(size=100000):
    """Partly compressible bytes spanning several copy-loop chunks."""
    block = os.urandom(512) + b"shrink" * 200
    return (block * (size // len(block) + 1))[:size]
