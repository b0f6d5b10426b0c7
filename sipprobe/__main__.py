from sipprobe.main import run

run()
