from modules.api.responder import JsonResponder


class TaskController:
    def __init__(self, add, get_tasks, update, mark_done, delete, bulk_delete, bulk_mark_done):
        self.add_service = add
        self.get_tasks_service = get_tasks
        self.update_service = update
        self.mark_done_service = mark_done
        self.delete_service = delete
        self.bulk_delete_service = bulk_delete
        self.bulk_mark_done_service = bulk_mark_done

    def add_task(self, req) -> JsonResponder:
        data = self.add_service.execute(req)
        return JsonResponder.success("Task added successfully").with_payload({"task": data["task"]})

    def get_tasks(self, req) -> JsonResponder:
        data = self.get_tasks_service.execute(req)
        return (
            JsonResponder.success("Task retrieved successfully")
            .with_payload({"task": data["task"]})
            .with_total_pages(data["totalPages"])
        )

    def update_task(self, req) -> JsonResponder:
        data = self.update_service.execute(req)
        return JsonResponder.success("Task updated successfully").with_payload({"task": data["task"]})

    def mark_done_task(self, req) -> JsonResponder:
        data = self.mark_done_service.execute(req)
        return JsonResponder.success("Task status updated successfully").with_payload({"task": data["task"]})

    def delete_task(self, req) -> JsonResponder:
        data = self.delete_service.execute(req)
        return JsonResponder.success("Task deleted successfully").with_payload({"id": data["id"]})

    def bulk_delete(self, req) -> JsonResponder:
        data = self.bulk_delete_service.execute(req)
        return JsonResponder.success("Tasks deleted successfully").with_payload({"count": data["count"]})

    def bulk_mark_done(self, req) -> JsonResponder:
        data = self.bulk_mark_done_service.execute(req)
        return JsonResponder.success("Tasks updated successfully").with_payload({"count": data["count"]})
