import os
from urllib.parse import quote
from downloader.config.settings import config

DOWNLOADS_ROUTE = "/downloads"

class DownloadsStore:
    """Directory holding finished downloads, served read-only under /downloads"""

    def __init__(self, directory: str):
        self.directory = os.path.abspath(directory)

    def ensure(self) -> None:
        """Create the directory (and parents) if missing"""
        os.makedirs(self.directory, exist_ok=True)

    def path_for(self, filename: str) -> str:
        return os.path.join(self.directory, filename)

    def public_url(self, filename: str) -> str:
        """Relative link under which the static mount serves a file"""
        return f"{DOWNLOADS_ROUTE}/{quote(filename)}"

store = DownloadsStore(config.storage.downloads_dir)
