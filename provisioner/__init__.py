"""
gemini-cli-provisioner — nvm + Node.js + Gemini CLI on a single Ubuntu host.
"""

__version__ = "0.1.0"
