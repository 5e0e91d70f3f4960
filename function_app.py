"""Azure Functions entry point serving the Cosmos item manager API."""

import azure.functions as func

from application import app as item_manager_app

app = func.AsgiFunctionApp(app=item_manager_app, http_auth_level=func.AuthLevel.FUNCTION)
