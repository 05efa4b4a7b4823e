import hashlib
import json
import os
import time
import uuid
from typing import Any, Dict, List, Optional


class RunLog:
    """
    Append-only JSON-lines record of a test run.
    Each entry carries the hash of the previous one, so the final hash
    written into the results document identifies the exact log it came from.
    """
    def __init__(self, log_file: Optional[str] = None, run_id: Optional[str] = None):
        self.run_id = run_id or str(uuid.uuid4())
        self.log_file = log_file
        self.chain_hash = hashlib.sha256(self.run_id.encode()).hexdigest()
        self.events: List[Dict[str, Any]] = []

        if self.log_file:
            parent = os.path.dirname(self.log_file)
            if parent and not os.path.exists(parent):
                os.makedirs(parent)
            # Fail before the run starts if the log cannot be written
            open(self.log_file, "a", encoding="utf-8").close()

    def log_event(self, event_type: str, data: Dict[str, Any]) -> str:
        entry = {
            "type": event_type,
            "timestamp": time.time(),
            "run_id": self.run_id,
            "data": data,
            "prev_hash": self.chain_hash,
        }
        entry_str = json.dumps(entry, sort_keys=True, default=str)
        self.chain_hash = hashlib.sha256((self.chain_hash + entry_str).encode()).hexdigest()

        entry["current_hash"] = self.chain_hash
        self.events.append(entry)

        if self.log_file:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")
        return self.chain_hash

    def close(self) -> Dict[str, Any]:
        self.log_event("RUN_COMPLETE", {"events": len(self.events)})
        return {"run_id": self.run_id, "final_hash": self.chain_hash, "log_file": self.log_file}
