from fastapi import HTTPException, status


def get_unknown_entity_exception(entity: str = "Entity"):
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{entity} not found"
    )


def get_conflict_exception(detail: str):
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=detail
    )


def get_invalid_input_exception(detail: str):
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=detail
    )
