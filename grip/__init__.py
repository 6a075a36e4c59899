"""A block of glyphs you can drag around the terminal with your mouse."""

import logging

from .core import *
from .controller import *
from .event import *
from .input import *
from .pointer import *
from .shape import *
from .terminal import *

logging.getLogger(__name__).addHandler(logging.NullHandler())
