# tests/test_cli.py
import json


def test_register_voter_and_show_results(app, services):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['register-voter', 'alice@x.edu', 'Alice', '10A'])
    assert result.exit_code == 0
    assert "Registered Alice in class 10A." in result.output

    result = runner.invoke(args=['register-voter', 'alice@x.edu', 'Alice', '10A'])
    assert result.exit_code != 0
    assert "Email already registered" in result.output

    runner.invoke(args=['register-voter', 'bob@x.edu', 'Bob', '10A'])
    runner.invoke(args=['register-voter', 'carol@x.edu', 'Carol', '10A'])
    ids = {c['name']: c['id'] for c in services['ballot_box'].list_candidates('10A')}
    token = services['issuer'].request_voting_link('alice@x.edu')['token']
    services['ballot_box'].submit_vote(token, ids['Bob'], 'leadership', ids['Carol'], 'experience')

    result = runner.invoke(args=['show-results'])
    assert result.exit_code == 0
    assert json.loads(result.output) == {"10A": {"Bob": 2, "Carol": 1}}


def test_register_voter_validates_email(app):
    result = app.test_cli_runner().invoke(args=['register-voter', 'not-an-email', 'Alice', '10A'])
    assert result.exit_code != 0
    assert "Invalid email address" in result.output


def test_init_db(app):
    result = app.test_cli_runner().invoke(args=['init-db'])
    assert result.exit_code == 0
