"""
AWS Lambda handler for PersonaRank Chat API

Routes all API Gateway requests through the FastAPI application.
"""

from mangum import Mangum

from personarank.main import app

# Create Mangum adapter for FastAPI
handler = Mangum(app, lifespan="off")
