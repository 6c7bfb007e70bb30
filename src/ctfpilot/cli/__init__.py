"""Command-line interface for ctfpilot."""

from __future__ import annotations

import asyncio as asyncio
import logging as logging

from ctfpilot import CtfPilot as CtfPilot
from ctfpilot import load_config as load_config
from ctfpilot.cli.app import main as main
from ctfpilot.cli.commands import apply as apply_command
from ctfpilot.cli.commands import destroy as destroy_command
from ctfpilot.cli.commands import import_challenge as import_command
from ctfpilot.cli.commands import plan as plan_command
from ctfpilot.cli.parser import build_parser as build_parser

_format_apply_summary = apply_command.format_apply_summary
_format_plan_summary = plan_command.format_plan_summary
_format_import_summary = import_command.format_import_summary
_format_destroy_summary = destroy_command.format_destroy_summary

_run_apply = apply_command.run_apply
_run_plan = plan_command.run_plan
_run_import = import_command.run_import
_run_destroy = destroy_command.run_destroy
