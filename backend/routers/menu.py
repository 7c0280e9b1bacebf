import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from menu_utils import (
    ParentNotFoundError,
    internal_error,
    invalid_move,
    menu_not_found,
    parent_not_found,
)
from models import (
    MenuItem,
    MenuItemCreate,
    MenuItemMove,
    MenuItemReorder,
    MenuItemUpdate,
    MenuNode,
    MenuResponse,
    MenusResponse,
)
from services import MenuService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/menus", tags=["menu"])


def get_menu_service(request: Request) -> MenuService:
    """Return the service bound to the running application."""
    return request.app.state.menu_service


def _as_item(node: MenuNode) -> MenuItem:
    return MenuItem(**node.model_dump())


def _check_new_parent(service: MenuService, menu_id: str, parent_id: Optional[str]) -> None:
    """Reject an unknown parent or one that would put the menu under itself."""
    if parent_id is None:
        return
    if service.get_by_id(parent_id) is None:
        raise parent_not_found()
    if service.would_create_cycle(menu_id, parent_id):
        raise invalid_move()


@router.get("", response_model=MenusResponse)
async def list_menus(service: MenuService = Depends(get_menu_service)):
    """Return every menu as a nested tree ordered by sibling order."""
    try:
        return MenusResponse(data=service.list_as_tree())
    except Exception as exc:
        logger.error(f"Error fetching menus: {exc}")
        raise internal_error("Failed to fetch menus")


@router.get("/{menu_id}", response_model=MenuResponse)
async def get_menu(menu_id: str, service: MenuService = Depends(get_menu_service)):
    """Return a single menu with its nested children."""
    try:
        menu = service.get_with_children(menu_id)
        if menu is None:
            raise menu_not_found()
        return MenuResponse(data=menu)
    except HTTPException:
        raise
    except Exception as exc:
        logger.error(f"Error fetching menu {menu_id}: {exc}")
        raise internal_error("Failed to fetch menu")


@router.post("", response_model=MenuResponse, status_code=status.HTTP_201_CREATED)
async def create_menu(
    request: MenuItemCreate, service: MenuService = Depends(get_menu_service)
):
    try:
        return MenuResponse(data=_as_item(service.create(request)))
    except ParentNotFoundError:
        raise parent_not_found()
    except Exception as exc:
        logger.error(f"Error creating menu: {exc}")
        raise internal_error("Failed to create menu")


@router.put("/{menu_id}", response_model=MenuResponse)
async def update_menu(
    menu_id: str,
    request: MenuItemUpdate,
    service: MenuService = Depends(get_menu_service),
):
    """Rename and/or reparent a menu. Only the fields sent are changed."""
    try:
        menu = service.get_by_id(menu_id)
        if menu is None:
            raise menu_not_found()

        new_parent_id = request.parent_id or None
        if request.changes_parent and new_parent_id != menu.parent_id:
            _check_new_parent(service, menu_id, new_parent_id)

        updated = service.update(menu_id, request)
        if updated is None:
            raise menu_not_found()
        return MenuResponse(data=_as_item(updated))
    except HTTPException:
        raise
    except ParentNotFoundError:
        raise parent_not_found()
    except Exception as exc:
        logger.error(f"Error updating menu {menu_id}: {exc}")
        raise internal_error("Failed to update menu")


@router.delete("/{menu_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_menu(menu_id: str, service: MenuService = Depends(get_menu_service)):
    """Delete a menu together with all of its descendants."""
    try:
        if not service.delete(menu_id):
            raise menu_not_found()
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except HTTPException:
        raise
    except Exception as exc:
        logger.error(f"Error deleting menu {menu_id}: {exc}")
        raise internal_error("Failed to delete menu")


@router.patch("/{menu_id}/move", response_model=MenuResponse)
async def move_menu(
    menu_id: str,
    request: MenuItemMove,
    service: MenuService = Depends(get_menu_service),
):
    """Move a menu under another parent, or to the root level with a null parent."""
    try:
        menu = service.get_by_id(menu_id)
        if menu is None:
            raise menu_not_found()

        new_parent_id = request.parent_id or None
        if new_parent_id != menu.parent_id:
            _check_new_parent(service, menu_id, new_parent_id)

        moved = service.move(menu_id, new_parent_id)
        if moved is None:
            raise menu_not_found()
        return MenuResponse(data=_as_item(moved))
    except HTTPException:
        raise
    except ParentNotFoundError:
        raise parent_not_found()
    except Exception as exc:
        logger.error(f"Error moving menu {menu_id}: {exc}")
        raise internal_error("Failed to move menu")


@router.patch("/{menu_id}/reorder", response_model=MenuResponse)
async def reorder_menu(
    menu_id: str,
    request: MenuItemReorder,
    service: MenuService = Depends(get_menu_service),
):
    """Change a menu's position among its siblings."""
    try:
        reordered = service.reorder(menu_id, request.order)
        if reordered is None:
            raise menu_not_found()
        return MenuResponse(data=_as_item(reordered))
    except HTTPException:
        raise
    except Exception as exc:
        logger.error(f"Error reordering menu {menu_id}: {exc}")
        raise internal_error("Failed to reorder menu")
