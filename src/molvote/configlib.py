#
# molvote - point-allocation voting and results for "mol" prediction games
# Copyright (C) 2025  The molvote authors
#
# This file is part of molvote.
#
# molvote is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
#

"""
Contains functions to help configure molvote.
"""

import logging
from pathlib import Path

import jinja2
from jinja2 import Environment, FileSystemLoader, PackageLoader

from molvote.ledger import DEFAULT_BUDGET
import molvote.templating as templating
import molvote.utils as utils
from molvote.utils import ENGLISH_LANG


_log = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    # Ballots that don't add up to the budget are flagged in the report.
    'budget': DEFAULT_BUDGET,
    'lang': ENGLISH_LANG,
    'top_count': 3,
}

# The config keys whose values must be positive ints.
POSITIVE_INT_KEYS = ('budget', 'top_count')


class Config(dict):

    """
    The configuration values, loaded from YAML files over the defaults.

    A config file can list further files to load under the "include" key.
    Paths in that list are relative to the including file.
    """

    def __init__(self, config_path=None):
        """
        Args:
          config_path: optional path to the YAML configuration file to
            load, as a path-like object.
        """
        super().__init__(DEFAULT_CONFIG)

        # Collect other include files to merge
        self.include_config = []

        if config_path is not None:
            self.overlay_config(self.load_config_file(config_path), replace=True)

        while len(self.include_config) > 0:
            path = self.include_config.pop(0)
            self.overlay_config(self.load_config_file(path))

        self.validate()

    def load_config_file(self, filepath):
        """
        Load and return the parsed contents of the specified file, as a dict.

        Raises an exception if the file is not present or is invalid.
        """
        _log.info(f'Loading config data from {filepath}')
        config = utils.read_yaml(filepath)
        if config is None:
            return {}
        if not isinstance(config, dict):
            raise RuntimeError(f'config file does not contain a mapping: {filepath}')

        includes = config.pop('include', None) or []
        if isinstance(includes, str):
            includes = [includes]
        parent = Path(filepath).parent
        self.include_config.extend(parent / path for path in includes)

        return config

    def overlay_config(self, newconfig, replace=False):
        """
        Overlay a configuration dict onto the configuration data.

        Args:
          newconfig: parsed configuration data dict, or None to skip.
          replace: if true, replace values already set by another file,
            otherwise only set values still at their defaults.
        """
        if not newconfig:
            return

        for key, value in newconfig.items():
            if key not in DEFAULT_CONFIG:
                _log.warning(f'ignoring unrecognized config key: {key!r}')
                continue
            if replace or self[key] == DEFAULT_CONFIG[key]:
                self[key] = value

    def validate(self):
        for key in POSITIVE_INT_KEYS:
            value = self[key]
            if type(value) is not int or value <= 0:
                raise RuntimeError(f'config value {key!r} must be a positive int: {value!r}')


def create_jinja_env(template_dirs=None, lang=None):
    """
    Create and return the Jinja2 Environment object.

    Args:
      template_dirs: optional directories to search for templates before
        the templates that ship with molvote.
      lang: the language to format dates in.  Defaults to English.
    """
    if template_dirs is None:
        template_dirs = []
    if lang is None:
        lang = ENGLISH_LANG

    loader = jinja2.ChoiceLoader([
        FileSystemLoader([str(path) for path in template_dirs]),
        PackageLoader('molvote', 'templates'),
    ])

    env = Environment(
        loader=loader,
        autoescape=jinja2.select_autoescape(['html', 'xml']),
        # Remove excess whitespace with lstrip_blocks and trim_blocks.
        lstrip_blocks=True,
        trim_blocks=True,
        keep_trailing_newline=True,
    )

    env.globals.update(lang=lang)

    filters = dict(
        format_date=templating.format_date,
        format_datetime=templating.format_datetime,
        format_number=utils.format_number,
        format_percent=utils.format_percent,
        join_names=templating.join_names,
        pluralize=utils.pluralize,
    )
    env.filters.update(filters)

    return env
