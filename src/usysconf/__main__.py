from usysconf.cli.app import app

app(prog_name="usysconf")
