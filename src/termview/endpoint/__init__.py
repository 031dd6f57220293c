"""Inbound HTTP endpoint module for termview.

Receives chat messages over HTTP, dispatches terminal commands to the
session registry, and runs the event sink that renders terminal frames
back into the chat.
"""
