from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.http import employee_required, employer_required, error_response, json_body, optional_int
from ..container import Container
from .model import ReviewQuery


def _optional_date(value: Optional[str]):
    if value is None or not str(value).strip():
        return None
    return parse_iso_date(str(value))


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reviews", methods=["GET"], endpoint="api_reviews_list")
    @employer_required
    def list_reviews():
        try:
            query = ReviewQuery(employee_id=optional_int(request.args.get("employeeId"), "employeeId"))
            reviews = container.review_service.list(query)
        except Exception as e:
            return error_response(e)
        return jsonify([r.to_dict() for r in reviews])

    @app.route("/api/reviews", methods=["POST"], endpoint="api_reviews_create")
    @employer_required
    def create_review():
        try:
            data = json_body()
            review = container.review_service.create(
                employee_id=optional_int(data.get("employeeId"), "employeeId"),
                reviewer_id=optional_int(data.get("reviewerId"), "reviewerId"),
                due_date=_optional_date(data.get("dueDate")),
                review_type=data.get("reviewType"),
                summary=data.get("summary"),
            )
        except Exception as e:
            return error_response(e)
        return jsonify(review.to_dict()), 201

    @app.route("/api/reviews/<int:review_id>", methods=["GET"], endpoint="api_reviews_get")
    @employer_required
    def get_review(review_id: int):
        try:
            review = container.review_service.get(review_id)
        except Exception as e:
            return error_response(e)
        return jsonify(review.to_dict())

    @app.route("/api/reviews/<int:review_id>", methods=["PUT"], endpoint="api_reviews_update")
    @employer_required
    def update_review(review_id: int):
        try:
            data = json_body()
            review = container.review_service.update(
                review_id,
                summary=data.get("summary"),
                self_assessment=data.get("selfAssessment"),
                final_rating=data.get("finalRating"),
                status=data.get("status"),
            )
        except Exception as e:
            return error_response(e)
        return jsonify(review.to_dict())

    @app.route("/api/reviews/<int:review_id>", methods=["DELETE"], endpoint="api_reviews_delete")
    @employer_required
    def delete_review(review_id: int):
        try:
            container.review_service.delete(review_id)
        except Exception as e:
            return error_response(e)
        return jsonify({"message": "Review deleted successfully"})

    @app.route("/api/reviews/<int:review_id>/notes", methods=["GET"], endpoint="api_review_notes")
    @employer_required
    def review_notes(review_id: int):
        try:
            review = container.review_service.get(review_id)
        except Exception as e:
            return error_response(e)
        notes = [n.to_dict() for n in review.notes]
        return jsonify(
            {
                "reviewId": review.review_id,
                "employeeId": review.employee_id,
                "employeeName": review.employee_name,
                "summary": review.summary,
                "notes": notes,
                "totalNotes": len(notes),
            }
        )

    @app.route("/api/reviews/<int:review_id>/notes", methods=["POST"], endpoint="api_review_notes_add")
    @employer_required
    def add_review_note(review_id: int):
        try:
            data = json_body()
            note, review = container.review_service.add_note(review_id, data.get("notes"), data.get("noteType"))
        except Exception as e:
            return error_response(e)
        return (
            jsonify({"note": note.to_dict(), "review": review.to_dict(), "message": "Review note saved successfully"}),
            201,
        )

    @app.route("/api/goals", methods=["POST"], endpoint="api_goals_create")
    @employer_required
    def create_goal():
        try:
            data = json_body()
            goal = container.review_service.add_goal(
                optional_int(data.get("reviewId"), "reviewId"),
                title=data.get("title"),
                description=data.get("description"),
                status=data.get("status"),
                target_date=_optional_date(data.get("targetDate")),
            )
        except Exception as e:
            return error_response(e)
        return jsonify(goal.to_dict()), 201

    @app.route("/api/goals/<int:goal_id>", methods=["GET"], endpoint="api_goals_get")
    @employer_required
    def get_goal(goal_id: int):
        try:
            goal = container.review_service.get_goal(goal_id)
        except Exception as e:
            return error_response(e)
        return jsonify(goal.to_dict())

    @app.route("/api/goals/<int:goal_id>", methods=["PUT"], endpoint="api_goals_update")
    @employer_required
    def update_goal(goal_id: int):
        try:
            data = json_body()
            goal = container.review_service.update_goal(
                goal_id,
                title=data.get("title"),
                description=data.get("description"),
                status=data.get("status"),
                target_date=_optional_date(data.get("targetDate")),
            )
        except Exception as e:
            return error_response(e)
        return jsonify(goal.to_dict())

    @app.route("/api/goals/<int:goal_id>", methods=["DELETE"], endpoint="api_goals_delete")
    @employer_required
    def delete_goal(goal_id: int):
        try:
            container.review_service.delete_goal(goal_id)
        except Exception as e:
            return error_response(e)
        return jsonify({"message": "Goal deleted successfully"})

    @app.route("/api/employee/reviews", methods=["GET"], endpoint="api_my_reviews")
    @employee_required
    def my_reviews():
        try:
            reviews = container.review_service.list(ReviewQuery(employee_id=int(session["employee_id"])))
        except Exception as e:
            return error_response(e)
        return jsonify([r.to_dict() for r in reviews])
