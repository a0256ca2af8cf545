# -*- coding: utf-8 -*-
# SPDX-License-Identifier: FAFOL

"""Exceptions raised while pulling a timesheet out of Connecteam"""


class ConnecTeamError(Exception):
    """Base class; every pipeline failure is one of these and ends the run."""
    stage = None  # set by get_timesheet.run to the step that failed


class TransportError(ConnecTeamError):
    """The request could not be sent, or came back with a non-2xx status."""


class SchemaError(ConnecTeamError):
    """The response is not JSON, or does not have the shape we navigate."""


class NotFoundError(ConnecTeamError):
    """No punch clock object in the account's content structure."""


class InputError(ConnecTeamError):
    """Bad user input: unparseable dates or a malformed cookie header."""
