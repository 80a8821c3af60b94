"""Outbound notification transports."""
from notifications.email_sender import EmailSender
