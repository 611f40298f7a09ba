"""Azure Functions V2 entry point: registers blueprints from src/."""

import os
import sys

# Add src/ to Python path so that Azure Functions runtime can resolve
# the monday_provisioner package from the src/ layout.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

import azure.functions as func

from monday_provisioner.functions.webhook_trigger import bp as webhook_bp

app = func.FunctionApp()
app.register_blueprint(webhook_bp)
