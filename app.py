"""WSGI / Flask CLI entry point: ``flask --app app run`` or ``flask --app app payroll previous-month``."""

from src.hr_operations.hr_operations.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run()
