# Overview: Service-layer exception taxonomy and the app-wide JSON error handlers.

from __future__ import annotations

import traceback

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .extensions import db

INTERNAL_ERROR_MESSAGE = "Erro interno do servidor"


class ServiceError(Exception):
    """Base for expected, user-facing failures raised by services."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ServiceError):
    """400-level input problem carrying every violated field."""

    def __init__(self, errors: list[dict], message: str = "Dados inválidos"):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> dict:
        return {"error": self.message, "errors": self.errors}


class NotFoundError(ServiceError):
    """Referenced entity absent or outside the caller's company."""
    status_code = 404


class BusinessRuleError(ServiceError):
    """Insufficient stock, entity still referenced, and similar rule violations."""


class ConflictError(ServiceError):
    """Duplicate email, document, or category name."""


def error_response(exc: ServiceError, status_code: int | None = None):
    return jsonify(exc.to_dict()), status_code or exc.status_code


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ServiceError)
    def handle_service_error(exc: ServiceError):
        return error_response(exc)

    @app.errorhandler(404)
    def handle_not_found(exc):
        app.logger.warning("Route not found method=%s path=%s", request.method, request.path)
        return jsonify({"error": "Rota não encontrada"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(exc):
        return jsonify({"error": "Método não permitido"}), 405

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"error": exc.description}), exc.code

        db.session.rollback()
        app.logger.exception(
            "Unhandled error method=%s path=%s ip=%s", request.method, request.path, request.remote_addr
        )
        payload = {"error": INTERNAL_ERROR_MESSAGE}
        if app.config.get("ENV") != "production":
            payload["detail"] = str(exc)
            payload["stack"] = traceback.format_exc()
        return jsonify(payload), 500
