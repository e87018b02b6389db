"""Command-line interface for opsboard."""

from __future__ import annotations

import asyncio
import logging as logging

from opsboard.cli.app import main as main
from opsboard.cli.commands import departures as departures_command
from opsboard.cli.commands import lists as lists_command
from opsboard.cli.commands import matrix as matrix_command
from opsboard.cli.parser import build_parser as build_parser
from opsboard.sdk import OpsBoard as OpsBoard
from opsboard.sdk import load_config as load_config

_format_matrix_summary = matrix_command.format_matrix_summary
_format_import_summary = departures_command.format_import_summary

_run_matrix_ensure = matrix_command.run_matrix_ensure
_run_matrix_show = matrix_command.run_matrix_show
_run_status = matrix_command.run_status
_run_departures_list = departures_command.run_departures_list
_run_departures_import = departures_command.run_departures_import
_run_departures_history = departures_command.run_departures_history
_run_lists_inspect = lists_command.run_lists_inspect
