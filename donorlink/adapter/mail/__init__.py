"""Outbound mail adapter."""

from .mailer import RecordingMailer, SmtpMailer

__all__ = ["RecordingMailer", "SmtpMailer"]
