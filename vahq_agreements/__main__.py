"""Entry point for python -m vahq_agreements"""

from vahq_agreements.cli.main import app

app()
