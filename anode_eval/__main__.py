from anode_eval.cli.main import app

app()
