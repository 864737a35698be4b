from amp_cache_tools import amp, config, keys
import typer

app = typer.Typer(no_args_is_help=True)
app.add_typer(amp.app, name="amp")
app.add_typer(keys.app, name="keys")
app.add_typer(config.app, name="config")
