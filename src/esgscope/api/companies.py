from flask import Blueprint, jsonify, request

from esgscope.company.model import CompanyCreate
from esgscope.company.service import CompanyService

bp = Blueprint("companies", __name__)

company_service = CompanyService()


@bp.route("", methods=["GET"])
def list_companies():
    """List all companies."""
    return jsonify([c.to_dict() for c in company_service.list()])


@bp.route("", methods=["POST"])
def create_company():
    """Create a new company."""
    data = CompanyCreate.from_dict(request.get_json(silent=True))
    company = company_service.create(data)
    return jsonify(company.to_dict()), 201


@bp.route("/<int:company_id>", methods=["GET"])
def get_company(company_id: int):
    """Get company by ID."""
    return jsonify(company_service.get(company_id).to_dict())


@bp.route("/<int:company_id>", methods=["PUT"])
def update_company(company_id: int):
    """Replace the editable fields of a company."""
    data = CompanyCreate.from_dict(request.get_json(silent=True))
    company = company_service.update(company_id, data)
    return jsonify(company.to_dict())


@bp.route("/<int:company_id>", methods=["DELETE"])
def delete_company(company_id: int):
    """Delete a company."""
    company_service.delete(company_id)
    return "", 204


@bp.route("/esg-performers", methods=["GET"])
def esg_performers():
    """Top ESG performing companies."""
    count = request.args.get("count", 5, type=int)
    return jsonify([c.to_dict() for c in company_service.top_esg_performers(count)])


@bp.route("/<int:company_id>/analyze", methods=["POST"])
def analyze_company(company_id: int):
    """Analyze a company and store the result on it."""
    result = company_service.analyze(company_id)
    return jsonify(result.to_dict())
