from .cli import cli_application

if __name__ == "__main__":
    cli_application()
