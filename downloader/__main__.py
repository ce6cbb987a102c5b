from downloader.main import run

run()
