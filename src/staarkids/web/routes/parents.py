"""Parent endpoints for linking and listing children."""

from fastapi import APIRouter, HTTPException, Query, status

from staarkids.db.parents_repository import (
    AlreadyLinkedError,
    ChildNotFoundError,
    NotAStudentError,
    link_child_to_parent,
    list_children,
)
from staarkids.db.users_repository import get_user
from staarkids.web.schemas import (
    ChildrenResponse,
    ParentLinkRequest,
    ParentRelationResponse,
    UserResponse,
)

router = APIRouter(prefix="/api/parent", tags=["parents"])


def _is_parent(user_id: str) -> bool:
    user = get_user(user_id)
    return user is not None and user.role == "parent"


@router.post(
    "/link-child",
    response_model=ParentRelationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def link_child(body: ParentLinkRequest) -> ParentRelationResponse:
    """Link a student account to a parent by the student's email."""
    if not _is_parent(body.parent_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only parents can link children",
        )

    try:
        relation = link_child_to_parent(body.parent_id, body.child_email)
    except ChildNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except NotAStudentError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AlreadyLinkedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ParentRelationResponse(**relation.to_dict())


@router.get("/children", response_model=ChildrenResponse)
async def children(parent_id: str = Query(..., alias="parentId")) -> ChildrenResponse:
    if not _is_parent(parent_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    kids = [UserResponse(**u.to_dict()) for u in list_children(parent_id)]
    return ChildrenResponse(children=kids, count=len(kids))
