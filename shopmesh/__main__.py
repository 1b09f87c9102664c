from shopmesh.cli import app

app()
