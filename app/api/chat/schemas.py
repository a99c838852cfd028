from pydantic import BaseModel, Field

# -----------------------------
# 🧾 Message Schemas
# -----------------------------

class ChatMessageOut(BaseModel):
    id: int
    role: str
    content: str

    model_config = {"from_attributes": True}


# -----------------------------
# 🚀 Send Endpoint
# -----------------------------

class ChatSendRequest(BaseModel):
    message: str
    has_file: bool = Field(default=False, alias="hasFile")

    model_config = {"populate_by_name": True}

class ChatReply(BaseModel):
    reply: str
