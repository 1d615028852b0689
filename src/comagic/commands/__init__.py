"""Built-in CLI sub-commands for comagic.

* :mod:`~comagic.commands.profile` -- add, list, show and remove stored
  profiles.
* :mod:`~comagic.commands.login` -- run one login exchange to check the
  credentials.
* :mod:`~comagic.commands.request` -- send one authenticated request.

Multi-command groups export a :class:`typer.Typer` sub-application; single
commands export a plain callback registered on the root app.
"""
