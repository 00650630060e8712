# Copyright (C) 2024 Collimator, Inc.
# SPDX-License-Identifier: AGPL-3.0-only
#
# This program is free software: you can redistribute it and/or modify it under
# the terms of the GNU Affero General Public License as published by the Free
# Software Foundation, version 3. This program is distributed in the hope that it
# will be useful, but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU Affero General
# Public License for more details.  You should have received a copy of the GNU
# Affero General Public License along with this program. If not, see
# <https://www.gnu.org/licenses/>.

import os

import click

from . import logging
from .error import StateSelectionError
from .model_json import StateSelectionOptions, StructuralModel
from .printing import format_sorted_equation_graph


@click.command(
    help="Select states of a structural DAE description (after Pantelides and "
    "BLT sorting) and print the sorted equation graph.",
    name="sort",
)
@click.option(
    "--model",
    default="model.json",
    type=click.Path(exists=True, file_okay=True, dir_okay=False),
    show_default=True,
    help="Path to the structural model JSON",
)
@click.option(
    "--no-stabilization",
    is_flag=True,
    help="Fail if the DAE requires stabilizing mue variables",
)
@click.option(
    "--equations/--no-equations",
    default=True,
    show_default=True,
    help="Print the sorted equations",
)
@click.option(
    "--output",
    default=None,
    type=click.Path(file_okay=True, dir_okay=False),
    help="Write the sorted equation graph to this JSON file",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level of the state selection",
)
def stateselection_sort(
    model: os.PathLike,
    no_stabilization=False,
    equations=True,
    output=None,
    log_level=None,
):
    if log_level is not None:
        logging.set_stream_handler()

    with open(model, encoding="utf-8") as f:
        structural_model = StructuralModel.from_json(f.read())

    options = StateSelectionOptions(
        with_stabilization=not no_stabilization,
        log_level=log_level,
    )
    try:
        graph = structural_model.sort(options)
    except StateSelectionError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(format_sorted_equation_graph(graph, equations=equations))

    if output is not None:
        with open(output, "w", encoding="utf-8") as f:
            f.write(graph.to_json())


@click.group()
def cli():
    pass


cli.add_command(stateselection_sort)

if __name__ == "__main__":
    cli()
