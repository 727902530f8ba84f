# pitchsync/__main__.py

from pitchsync.cli.main import cli

if __name__ == "__main__":
    cli()
