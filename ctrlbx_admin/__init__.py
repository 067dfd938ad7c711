# =======================================================================================
# ctrlbx_admin/__init__.py - Package Initialization
# =======================================================================================
"""
CtrlBx Admin - ESP32 Access Control Dashboard

Client core of the administration dashboard: talks to the spreadsheet
backend, keeps the operator session and enforces role capabilities before
any request leaves the client.
"""

__version__ = "2.0.0"
__author__ = "CtrlBx Team"
