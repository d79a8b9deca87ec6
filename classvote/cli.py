# classvote/cli.py

# Operator commands, run with `flask --app classvote <command>`

import json

import click

from classvote import db
from classvote.errors import VotingError


def register_commands(app):
    @app.cli.command('init-db')
    def init_db():
        """Create the key-value table."""
        db.create_all()
        click.echo("Database initialised.")

    @app.cli.command('register-voter')
    @click.argument('email')
    @click.argument('full_name')
    @click.argument('class_label')
    def register_voter(email, full_name, class_label):
        """Register a voter (and candidate) without the email link flow."""
        services = app.extensions['classvote']
        validator = services['validator']
        try:
            email = validator.require_email(email)
            full_name, class_label = validator.normalize_registration(full_name, class_label)
            services['registration'].register_direct(email, full_name, class_label)
        except VotingError as e:
            raise click.ClickException(e.message)
        services['audit'].log_security_event('voter_registered', {'class': class_label, 'method': 'cli'})
        click.echo(f"Registered {full_name} in class {class_label}.")

    @app.cli.command('show-results')
    def show_results():
        """Print per-class scores as JSON."""
        results = app.extensions['classvote']['ballot_box'].get_results()
        click.echo(json.dumps(results, indent=2, sort_keys=True))
