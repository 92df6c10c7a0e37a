# =======================================================================================
# knocklock/__init__.py - Package Initialization
# =======================================================================================
"""
KnockLock Control Core

State synchronization, command and audit core for a smart lock that opens
by remote command, RFID tag or knock pattern.
"""

__version__ = "1.0.0"
__author__ = "KnockLock Team"
