from celery import shared_task

from innogram.assets.services import delete_files_from_storage


@shared_task(name="assets.delete_files")
def delete_files(filenames: list[str], folder: str = "") -> int:
    return delete_files_from_storage(filenames, folder)
