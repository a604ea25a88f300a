def main() -> None:
    from app.cli import run_server
    from app.main import app

    run_server(app)


if __name__ == "__main__":
    main()
