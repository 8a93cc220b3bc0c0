from .communicator import JsonRpcCommunicator, JsonRpcError
